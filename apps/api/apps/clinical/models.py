"""
Clinical models: patient, appointment, treatment_plan, treatment_visit.
"""
import uuid
from django.db import models


# ============================================================================
# Enums
# ============================================================================


class SexChoices(models.TextChoices):
    FEMALE = 'female', 'Female'
    MALE = 'male', 'Male'
    OTHER = 'other', 'Other'
    UNKNOWN = 'unknown', 'Unknown'


class AppointmentTypeChoices(models.TextChoices):
    CHECKUP = 'checkup', 'Checkup'
    CLEANING = 'cleaning', 'Cleaning'
    FILLING = 'filling', 'Filling'
    EXTRACTION = 'extraction', 'Extraction'
    ROOT_CANAL = 'root_canal', 'Root Canal'
    CONSULTATION = 'consultation', 'Consultation'
    OTHER = 'other', 'Other'


class AppointmentStatusChoices(models.TextChoices):
    """
    Appointment status:
    - scheduled -> completed | cancelled
    - completed, cancelled are terminal states
    """
    SCHEDULED = 'scheduled', 'Scheduled'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'


class TreatmentPlanStatusChoices(models.TextChoices):
    PLANNED = 'planned', 'Planned'
    IN_PROGRESS = 'in_progress', 'In Progress'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'


class PriorityChoices(models.TextChoices):
    LOW = 'low', 'Low'
    MEDIUM = 'medium', 'Medium'
    HIGH = 'high', 'High'
    URGENT = 'urgent', 'Urgent'


class VisitStatusChoices(models.TextChoices):
    PENDING = 'pending', 'Pending'
    SCHEDULED = 'scheduled', 'Scheduled'
    COMPLETED = 'completed', 'Completed'
    CANCELLED = 'cancelled', 'Cancelled'


# ============================================================================
# Patients
# ============================================================================


class Patient(models.Model):
    """Patient master record. Soft-deleted, never removed."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    birth_date = models.DateField(blank=True, null=True)
    sex = models.CharField(
        max_length=20,
        choices=SexChoices.choices,
        default=SexChoices.UNKNOWN
    )

    email = models.EmailField(blank=True, null=True)
    phone = models.CharField(max_length=50, blank=True, null=True)
    address_line1 = models.CharField(max_length=255, blank=True, null=True)
    city = models.CharField(max_length=100, blank=True, null=True)
    postal_code = models.CharField(max_length=20, blank=True, null=True)

    medical_history = models.TextField(blank=True, null=True)
    allergies = models.TextField(blank=True, null=True)
    notes = models.TextField(blank=True, null=True)

    # Soft delete
    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'patient'
        verbose_name = 'Patient'
        verbose_name_plural = 'Patients'
        ordering = ['last_name', 'first_name']
        indexes = [
            models.Index(fields=['last_name', 'first_name'], name='idx_patient_name'),
            models.Index(fields=['is_deleted'], name='idx_patient_deleted'),
        ]

    def __str__(self):
        return self.full_name

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()


# ============================================================================
# Appointments
# ============================================================================


class Appointment(models.Model):
    """
    A booked chair slot.

    BUSINESS RULES (enforced in clean()):
    1. end_time must be after start_time
    2. No overlapping scheduled appointments for the same practitioner
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    patient = models.ForeignKey(
        'Patient',
        on_delete=models.PROTECT,
        related_name='appointments'
    )
    practitioner = models.ForeignKey(
        'authz.Practitioner',
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='appointments'
    )
    treatment_visit = models.ForeignKey(
        'TreatmentVisit',
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name='appointments'
    )
    title = models.CharField(max_length=255, blank=True, default='')
    type = models.CharField(
        max_length=20,
        choices=AppointmentTypeChoices.choices,
        default=AppointmentTypeChoices.CHECKUP
    )
    status = models.CharField(
        max_length=20,
        choices=AppointmentStatusChoices.choices,
        default=AppointmentStatusChoices.SCHEDULED
    )
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    notes = models.TextField(blank=True, null=True)

    # Soft delete
    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'appointment'
        verbose_name = 'Appointment'
        verbose_name_plural = 'Appointments'
        ordering = ['start_time']
        indexes = [
            models.Index(fields=['patient'], name='idx_appointment_patient'),
            models.Index(fields=['practitioner'], name='idx_appointment_practitioner'),
            models.Index(fields=['start_time'], name='idx_appointment_start'),
            models.Index(fields=['status'], name='idx_appointment_status'),
        ]

    # Statuses that occupy the practitioner's chair
    _ACTIVE_STATUSES = ['scheduled']

    def __str__(self):
        return f"Appointment {self.start_time:%Y-%m-%d %H:%M} - {self.patient}"

    def clean(self):
        from django.core.exceptions import ValidationError

        errors = {}

        if self.start_time and self.end_time and self.end_time <= self.start_time:
            errors['end_time'] = 'End time must be after start time'

        if not errors and self.practitioner_id and self.status in self._ACTIVE_STATUSES:
            if self._practitioner_overlaps().exists():
                errors['start_time'] = 'The practitioner already has an appointment in this time range'

        if errors:
            raise ValidationError(errors)

    def _practitioner_overlaps(self):
        """
        Active, non-deleted appointments of the same practitioner whose
        interval intersects this one: (start1 < end2) AND (start2 < end1).
        """
        if not self.practitioner_id or not self.start_time or not self.end_time:
            return Appointment.objects.none()

        qs = Appointment.objects.filter(
            practitioner_id=self.practitioner_id,
            status__in=self._ACTIVE_STATUSES,
            is_deleted=False,
            start_time__lt=self.end_time,
            end_time__gt=self.start_time,
        )
        if self.pk:
            qs = qs.exclude(pk=self.pk)
        return qs


# ============================================================================
# Treatment plans
# ============================================================================


class TreatmentPlan(models.Model):
    """
    A multi-visit course of treatment for one patient.

    start_date is stored as text: plans imported from the previous system
    carry free-form dates, and projection copes with unparseable values.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    patient = models.ForeignKey(
        'Patient',
        on_delete=models.PROTECT,
        related_name='treatment_plans'
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    start_date = models.CharField(max_length=64)
    end_date = models.DateField(blank=True, null=True)
    status = models.CharField(
        max_length=20,
        choices=TreatmentPlanStatusChoices.choices,
        default=TreatmentPlanStatusChoices.PLANNED
    )
    priority = models.CharField(
        max_length=20,
        choices=PriorityChoices.choices,
        default=PriorityChoices.MEDIUM
    )
    estimated_cost = models.DecimalField(max_digits=10, decimal_places=2, blank=True, null=True)
    ai_generated = models.BooleanField(default=False)

    # Soft delete
    is_deleted = models.BooleanField(default=False)
    deleted_at = models.DateTimeField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'treatment_plan'
        verbose_name = 'Treatment Plan'
        verbose_name_plural = 'Treatment Plans'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['patient'], name='idx_treatment_plan_patient'),
            models.Index(fields=['status'], name='idx_treatment_plan_status'),
        ]

    def __str__(self):
        return f"{self.title} ({self.patient})"


class TreatmentVisit(models.Model):
    """
    One sitting of a treatment plan.

    time_gap is the wait *before the next visit* ("2 weeks"), kept as the
    free text entered or generated for the plan.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    treatment_plan = models.ForeignKey(
        'TreatmentPlan',
        on_delete=models.CASCADE,
        related_name='visits'
    )
    visit_number = models.PositiveIntegerField()
    procedures = models.TextField(blank=True, default='')
    estimated_duration = models.CharField(max_length=64, blank=True, null=True)
    time_gap = models.CharField(max_length=64, blank=True, null=True)
    scheduled_date = models.DateField(blank=True, null=True)
    completed_date = models.DateField(blank=True, null=True)
    status = models.CharField(
        max_length=20,
        choices=VisitStatusChoices.choices,
        default=VisitStatusChoices.PENDING
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'treatment_visit'
        verbose_name = 'Treatment Visit'
        verbose_name_plural = 'Treatment Visits'
        ordering = ['treatment_plan', 'visit_number']
        constraints = [
            models.UniqueConstraint(
                fields=['treatment_plan', 'visit_number'],
                name='uniq_treatment_visit_number',
            ),
        ]

    def __str__(self):
        return f"Visit {self.visit_number} of {self.treatment_plan.title}"
