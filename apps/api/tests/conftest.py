"""
Global test fixtures for pytest.

Provides reusable fixtures for API testing:
- Authenticated API clients by role
- Model instances (Patient, Practitioner, Appointment, TreatmentPlan)
"""
from datetime import datetime

import pytest
import pytz
from rest_framework.test import APIClient

from apps.authz.models import User, Role, UserRole, Practitioner, RoleChoices
from apps.clinical.models import Patient, Appointment, TreatmentPlan, TreatmentVisit


def create_user_with_role(email, role_name, **extra):
    """Create an active user holding one system role."""
    user = User.objects.create_user(
        email=email,
        password='testpass123',
        is_active=True,
        **extra
    )
    role, _ = Role.objects.get_or_create(name=role_name)
    UserRole.objects.create(user=user, role=role)
    return user


def authenticated_client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


def utc(*args):
    """Aware UTC datetime shorthand."""
    return pytz.utc.localize(datetime(*args))


# ============================================================================
# API Clients
# ============================================================================

@pytest.fixture
def api_client():
    """Unauthenticated DRF API client."""
    return APIClient()


@pytest.fixture
def admin_client(db):
    """Admin: full access, including soft deletes."""
    user = create_user_with_role('admin@test.com', RoleChoices.ADMIN, is_staff=True)
    return authenticated_client(user)


@pytest.fixture
def dentist_client(db):
    """Dentist: clinical access, authors treatment plans."""
    user = create_user_with_role('dentist@test.com', RoleChoices.DENTIST)
    return authenticated_client(user)


@pytest.fixture
def reception_client(db):
    """Reception: patients, appointments, calendar; reads plans."""
    user = create_user_with_role('reception@test.com', RoleChoices.RECEPTION)
    return authenticated_client(user)


@pytest.fixture
def accounting_client(db):
    """Accounting: read-only patients, nothing else."""
    user = create_user_with_role('accounting@test.com', RoleChoices.ACCOUNTING)
    return authenticated_client(user)


# ============================================================================
# Data Fixtures
# ============================================================================

@pytest.fixture
def practitioner(db):
    user = create_user_with_role('dr.smith@test.com', RoleChoices.DENTIST)
    return Practitioner.objects.create(
        user=user,
        display_name='Dr. Jane Smith',
        is_active=True
    )


@pytest.fixture
def other_practitioner(db):
    user = create_user_with_role('dr.jones@test.com', RoleChoices.DENTIST)
    return Practitioner.objects.create(
        user=user,
        display_name='Dr. Tom Jones',
        role_type='hygienist',
        is_active=True
    )


@pytest.fixture
def patient(db):
    return Patient.objects.create(
        first_name='John',
        last_name='Doe',
        birth_date='1990-01-15',
        sex='male',
        email='john.doe@test.com',
        phone='+33600000000',
    )


@pytest.fixture
def appointment(db, patient, practitioner):
    """Monday 2024-01-08, 09:30-11:00 UTC."""
    return Appointment.objects.create(
        patient=patient,
        practitioner=practitioner,
        type='cleaning',
        status='scheduled',
        start_time=utc(2024, 1, 8, 9, 30),
        end_time=utc(2024, 1, 8, 11, 0),
    )


@pytest.fixture
def treatment_plan(db, patient):
    """Three visits: 2 weeks, then 1 month, then end of plan."""
    plan = TreatmentPlan.objects.create(
        patient=patient,
        title='Root canal and crown',
        start_date='2024-01-01',
    )
    TreatmentVisit.objects.create(treatment_plan=plan, visit_number=1,
                                  procedures='Root canal', time_gap='2 weeks')
    TreatmentVisit.objects.create(treatment_plan=plan, visit_number=2,
                                  procedures='Temporary crown', time_gap='1 month')
    TreatmentVisit.objects.create(treatment_plan=plan, visit_number=3,
                                  procedures='Final crown', time_gap=None)
    return plan
