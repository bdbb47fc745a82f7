"""
Tests for the Appointment API.

Covers:
- Interval validation (end after start, practitioner overlap)
- Status transitions
- Date range / practitioner filters
- Soft delete and role permissions
"""
import pytest
from rest_framework import status

from apps.clinical.models import Appointment

from .conftest import utc


APPOINTMENTS_URL = '/api/v1/clinical/appointments/'


def appointment_url(appointment):
    return f'{APPOINTMENTS_URL}{appointment.id}/'


def booking(patient, practitioner=None, start='2024-01-08T14:00:00Z', end='2024-01-08T15:00:00Z', **extra):
    payload = {
        'patient_id': str(patient.id),
        'type': 'checkup',
        'start_time': start,
        'end_time': end,
    }
    if practitioner is not None:
        payload['practitioner_id'] = str(practitioner.id)
    payload.update(extra)
    return payload


@pytest.mark.django_db
class TestAppointmentCreate:

    def test_create_appointment(self, reception_client, patient, practitioner):
        response = reception_client.post(APPOINTMENTS_URL, booking(patient, practitioner), format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['patient_name'] == 'John Doe'
        assert response.data['practitioner_name'] == 'Dr. Jane Smith'
        assert response.data['status'] == 'scheduled'

    def test_end_before_start_rejected(self, reception_client, patient, practitioner):
        payload = booking(patient, practitioner, start='2024-01-08T15:00:00Z', end='2024-01-08T14:00:00Z')

        response = reception_client.post(APPOINTMENTS_URL, payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'end_time' in response.data

    def test_zero_length_rejected(self, reception_client, patient):
        payload = booking(patient, start='2024-01-08T15:00:00Z', end='2024-01-08T15:00:00Z')

        response = reception_client.post(APPOINTMENTS_URL, payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_practitioner_overlap_rejected(self, reception_client, appointment, patient, practitioner):
        payload = booking(patient, practitioner, start='2024-01-08T10:30:00Z', end='2024-01-08T11:30:00Z')

        response = reception_client.post(APPOINTMENTS_URL, payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'start_time' in response.data

    def test_back_to_back_allowed(self, reception_client, appointment, patient, practitioner):
        payload = booking(patient, practitioner, start='2024-01-08T11:00:00Z', end='2024-01-08T11:30:00Z')

        response = reception_client.post(APPOINTMENTS_URL, payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED

    def test_other_practitioner_may_overlap(self, reception_client, appointment, patient, other_practitioner):
        payload = booking(patient, other_practitioner, start='2024-01-08T10:00:00Z', end='2024-01-08T10:30:00Z')

        response = reception_client.post(APPOINTMENTS_URL, payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED

    def test_cancelled_appointment_frees_the_slot(self, reception_client, appointment, patient, practitioner):
        appointment.status = 'cancelled'
        appointment.save()
        payload = booking(patient, practitioner, start='2024-01-08T10:00:00Z', end='2024-01-08T10:30:00Z')

        response = reception_client.post(APPOINTMENTS_URL, payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED

    def test_link_to_treatment_visit(self, reception_client, treatment_plan, patient):
        visit = treatment_plan.visits.get(visit_number=1)

        response = reception_client.post(
            APPOINTMENTS_URL, booking(patient, treatment_visit_id=str(visit.id)), format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['treatment_visit_id'] == visit.id

    def test_visit_of_another_patient_rejected(self, reception_client, treatment_plan):
        from apps.clinical.models import Patient
        stranger = Patient.objects.create(first_name='Ann', last_name='Other', birth_date='1980-05-05')
        visit = treatment_plan.visits.get(visit_number=1)

        response = reception_client.post(
            APPOINTMENTS_URL, booking(stranger, treatment_visit_id=str(visit.id)), format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'treatment_visit_id' in response.data


@pytest.mark.django_db
class TestAppointmentUpdate:

    def test_move_appointment(self, reception_client, appointment):
        response = reception_client.patch(
            appointment_url(appointment),
            {'start_time': '2024-01-08T13:00:00Z', 'end_time': '2024-01-08T14:00:00Z'},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        appointment.refresh_from_db()
        assert appointment.start_time == utc(2024, 1, 8, 13, 0)

    def test_rejected_update_leaves_row_untouched(self, reception_client, appointment):
        response = reception_client.patch(
            appointment_url(appointment), {'end_time': '2024-01-08T09:00:00Z'}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        appointment.refresh_from_db()
        assert appointment.end_time == utc(2024, 1, 8, 11, 0)

    def test_scheduled_to_completed(self, dentist_client, appointment):
        response = dentist_client.patch(appointment_url(appointment), {'status': 'completed'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'completed'

    def test_terminal_status_cannot_change(self, dentist_client, appointment):
        appointment.status = 'cancelled'
        appointment.save()

        response = dentist_client.patch(appointment_url(appointment), {'status': 'scheduled'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'status' in response.data


@pytest.mark.django_db
class TestAppointmentFilters:

    @pytest.fixture
    def week(self, patient, practitioner, other_practitioner):
        return [
            Appointment.objects.create(patient=patient, practitioner=practitioner,
                                       start_time=utc(2024, 1, 8, 9, 0), end_time=utc(2024, 1, 8, 10, 0)),
            Appointment.objects.create(patient=patient, practitioner=other_practitioner,
                                       start_time=utc(2024, 1, 10, 9, 0), end_time=utc(2024, 1, 10, 10, 0)),
            Appointment.objects.create(patient=patient, practitioner=practitioner,
                                       start_time=utc(2024, 1, 12, 16, 0), end_time=utc(2024, 1, 12, 17, 0),
                                       status='cancelled'),
        ]

    def test_date_range_inclusive(self, reception_client, week):
        response = reception_client.get(APPOINTMENTS_URL, {'date_from': '2024-01-08', 'date_to': '2024-01-10'})

        assert response.status_code == status.HTTP_200_OK
        assert [a['id'] for a in response.data['results']] == [str(week[0].id), str(week[1].id)]

    def test_date_to_covers_the_whole_day(self, reception_client, week):
        response = reception_client.get(APPOINTMENTS_URL, {'date_to': '2024-01-10'})

        assert response.status_code == status.HTTP_200_OK
        assert str(week[1].id) in [a['id'] for a in response.data['results']]
        assert response.data['count'] == 2

    def test_date_from_is_start_of_day(self, reception_client, week):
        response = reception_client.get(APPOINTMENTS_URL, {'date_from': '2024-01-12'})

        assert [a['id'] for a in response.data['results']] == [str(week[2].id)]

    def test_datetime_bound(self, reception_client, week):
        response = reception_client.get(APPOINTMENTS_URL, {'date_from': '2024-01-10T12:00:00Z'})

        assert response.data['count'] == 1

    def test_invalid_date_rejected(self, reception_client, week):
        response = reception_client.get(APPOINTMENTS_URL, {'date_from': 'last tuesday'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'date_from' in response.data

    @pytest.mark.parametrize('value', ['2024-02-30', '2024-01-10T25:00:00Z'])
    def test_impossible_date_rejected(self, reception_client, week, value):
        response = reception_client.get(APPOINTMENTS_URL, {'date_to': value})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'date_to' in response.data

    def test_practitioner_filter(self, reception_client, week, other_practitioner):
        response = reception_client.get(APPOINTMENTS_URL, {'practitioner_id': str(other_practitioner.id)})

        assert response.data['count'] == 1
        assert response.data['results'][0]['practitioner_name'] == 'Dr. Tom Jones'

    def test_status_filter(self, reception_client, week):
        response = reception_client.get(APPOINTMENTS_URL, {'status': 'cancelled'})

        assert response.data['count'] == 1


@pytest.mark.django_db
class TestAppointmentPermissions:

    def test_accounting_cannot_read(self, accounting_client, appointment):
        response = accounting_client.get(APPOINTMENTS_URL)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_reception_cannot_delete(self, reception_client, appointment):
        response = reception_client.delete(appointment_url(appointment))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_admin_soft_deletes(self, admin_client, appointment):
        response = admin_client.delete(appointment_url(appointment))

        assert response.status_code == status.HTTP_204_NO_CONTENT
        appointment.refresh_from_db()
        assert appointment.is_deleted
        assert admin_client.get(APPOINTMENTS_URL).data['count'] == 0

    def test_deleted_appointment_frees_the_slot(self, admin_client, appointment, patient, practitioner):
        admin_client.delete(appointment_url(appointment))

        response = admin_client.post(APPOINTMENTS_URL, booking(
            patient, practitioner, start='2024-01-08T09:30:00Z', end='2024-01-08T11:00:00Z'
        ), format='json')

        assert response.status_code == status.HTTP_201_CREATED


@pytest.mark.django_db
class TestPatientEndpoints:
    """Patients back every appointment and plan; smoke coverage of the CRUD."""

    def test_search(self, reception_client, patient):
        response = reception_client.get('/api/v1/clinical/patients/', {'q': 'doe'})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1

    def test_accounting_reads_but_cannot_write(self, accounting_client, patient):
        assert accounting_client.get('/api/v1/clinical/patients/').status_code == status.HTTP_200_OK

        response = accounting_client.post(
            '/api/v1/clinical/patients/', {'first_name': 'A', 'last_name': 'B'}, format='json'
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_future_birth_date_rejected(self, reception_client):
        response = reception_client.post('/api/v1/clinical/patients/', {
            'first_name': 'Baby', 'last_name': 'Future', 'birth_date': '2999-01-01',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'birth_date' in response.data
