"""
Clinical serializers: patients, appointments, treatment plans and visits.
"""
from datetime import date

from django.core.exceptions import ValidationError
from django.db import transaction
from rest_framework import serializers

from apps.authz.models import Practitioner
from apps.clinical.models import (
    Appointment,
    AppointmentStatusChoices,
    Patient,
    TreatmentPlan,
    TreatmentVisit,
)
from apps.clinical.scheduling import CalendarView, TimeGap, parse_time_gap, visible_days


# ============================================================================
# Patients
# ============================================================================


class PatientListSerializer(serializers.ModelSerializer):
    """Serializer for Patient list view (limited fields)"""

    class Meta:
        model = Patient
        fields = [
            'id',
            'first_name',
            'last_name',
            'birth_date',
            'sex',
            'email',
            'phone',
            'is_deleted',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class PatientDetailSerializer(serializers.ModelSerializer):
    """Serializer for Patient detail/create/update (all fields)."""

    class Meta:
        model = Patient
        fields = [
            'id',
            'first_name',
            'last_name',
            'birth_date',
            'sex',
            'email',
            'phone',
            'address_line1',
            'city',
            'postal_code',
            'medical_history',
            'allergies',
            'notes',
            'is_deleted',
            'deleted_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = [
            'id',
            'is_deleted',
            'deleted_at',
            'created_at',
            'updated_at',
        ]

    def validate_birth_date(self, value):
        """Birth date cannot be in the future"""
        from datetime import date
        if value and value > date.today():
            raise serializers.ValidationError('Birth date cannot be in the future')
        return value


# ============================================================================
# Appointments
# ============================================================================


class AppointmentListSerializer(serializers.ModelSerializer):
    """Serializer for Appointment list/detail views"""
    patient_name = serializers.SerializerMethodField()
    practitioner_name = serializers.SerializerMethodField()

    class Meta:
        model = Appointment
        fields = [
            'id',
            'patient_id',
            'patient_name',
            'practitioner_id',
            'practitioner_name',
            'treatment_visit_id',
            'title',
            'type',
            'status',
            'start_time',
            'end_time',
            'notes',
            'is_deleted',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_patient_name(self, obj):
        if obj.patient:
            return obj.patient.full_name
        return None

    def get_practitioner_name(self, obj):
        if obj.practitioner:
            return obj.practitioner.display_name
        return None


class AppointmentWriteSerializer(serializers.ModelSerializer):
    """
    Serializer for Appointment create/update.

    Status moves scheduled -> completed | cancelled; completed and cancelled
    are terminal.
    """
    patient_id = serializers.PrimaryKeyRelatedField(
        source='patient',
        queryset=Patient.objects.filter(is_deleted=False),
    )
    practitioner_id = serializers.PrimaryKeyRelatedField(
        source='practitioner',
        queryset=Practitioner.objects.filter(is_active=True),
        required=False,
        allow_null=True,
    )
    treatment_visit_id = serializers.PrimaryKeyRelatedField(
        source='treatment_visit',
        queryset=TreatmentVisit.objects.all(),
        required=False,
        allow_null=True,
    )

    ALLOWED_TRANSITIONS = {
        AppointmentStatusChoices.SCHEDULED: [
            AppointmentStatusChoices.COMPLETED,
            AppointmentStatusChoices.CANCELLED,
        ],
        AppointmentStatusChoices.COMPLETED: [],  # Terminal state
        AppointmentStatusChoices.CANCELLED: [],  # Terminal state
    }

    class Meta:
        model = Appointment
        fields = [
            'id',
            'patient_id',
            'practitioner_id',
            'treatment_visit_id',
            'title',
            'type',
            'status',
            'start_time',
            'end_time',
            'notes',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_status(self, value):
        if self.instance and value != self.instance.status:
            if value not in self.ALLOWED_TRANSITIONS.get(self.instance.status, []):
                raise serializers.ValidationError(
                    f"Invalid transition from {self.instance.status} to {value}"
                )
        return value

    def validate(self, attrs):
        """
        Model-level validation using Appointment.clean()

        - end_time after start_time
        - no overlapping appointments for the practitioner
        """
        treatment_visit = attrs.get('treatment_visit')
        patient = attrs.get('patient', getattr(self.instance, 'patient', None))
        if treatment_visit and patient and treatment_visit.treatment_plan.patient_id != patient.pk:
            raise serializers.ValidationError({
                'treatment_visit_id': ['Visit belongs to another patient']
            })

        # Validate on a scratch copy so a rejected update leaves the instance untouched
        if self.instance:
            candidate = Appointment.objects.get(pk=self.instance.pk)
        else:
            candidate = Appointment()
        for key, value in attrs.items():
            setattr(candidate, key, value)

        try:
            candidate.clean()
        except ValidationError as e:
            raise serializers.ValidationError(e.message_dict)

        return attrs


# ============================================================================
# Treatment plans
# ============================================================================


class TimeGapField(serializers.Field):
    """
    Visit time gap.

    Accepts free text ("2 weeks") or structured input
    ({"amount": 2, "unit": "weeks"}). Structured input is normalised to the
    canonical text form; free text is stored as entered.
    """
    default_error_messages = {
        'invalid': 'Expected text or an object with "amount" and "unit".',
        'max_length': 'Ensure this field has no more than {max_length} characters.',
    }

    def __init__(self, max_length=None, **kwargs):
        kwargs.setdefault('allow_null', True)
        kwargs.setdefault('required', False)
        if max_length is None:
            max_length = TreatmentVisit._meta.get_field('time_gap').max_length
        self.max_length = max_length
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        if isinstance(data, str):
            text = data.strip() or None
        elif isinstance(data, dict):
            if 'amount' not in data or 'unit' not in data:
                self.fail('invalid')
            try:
                gap = TimeGap.from_parts(data['amount'], data['unit'])
            except ValueError as e:
                raise serializers.ValidationError(str(e))
            text = str(gap)
        else:
            self.fail('invalid')

        if text is not None and len(text) > self.max_length:
            self.fail('max_length', max_length=self.max_length)
        return text

    def to_representation(self, value):
        return value


class TreatmentVisitSerializer(serializers.ModelSerializer):
    time_gap = TimeGapField()
    time_gap_parsed = serializers.SerializerMethodField()
    visit_number = serializers.IntegerField(min_value=1, required=False)

    class Meta:
        model = TreatmentVisit
        fields = [
            'id',
            'visit_number',
            'procedures',
            'estimated_duration',
            'time_gap',
            'time_gap_parsed',
            'scheduled_date',
            'status',
            'completed_date',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def get_time_gap_parsed(self, obj):
        gap = parse_time_gap(obj.time_gap)
        if gap is None:
            return None
        return {'amount': gap.amount, 'unit': gap.unit}

    def validate_visit_number(self, value):
        plan = self.context.get('treatment_plan')
        if plan is None:
            return value
        qs = plan.visits.filter(visit_number=value)
        if self.instance:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError(
                f"Visit {value} already exists in this plan"
            )
        return value


class TreatmentPlanListSerializer(serializers.ModelSerializer):
    patient_name = serializers.SerializerMethodField()
    visit_count = serializers.SerializerMethodField()

    class Meta:
        model = TreatmentPlan
        fields = [
            'id',
            'patient_id',
            'patient_name',
            'title',
            'start_date',
            'status',
            'priority',
            'estimated_cost',
            'ai_generated',
            'visit_count',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_patient_name(self, obj):
        return obj.patient.full_name

    def get_visit_count(self, obj):
        return obj.visits.count()


class TreatmentPlanDetailSerializer(serializers.ModelSerializer):
    """
    Treatment plan create/update/detail.

    Visits are accepted nested on create only; afterwards they are managed
    through /treatment-plans/{id}/visits/.
    """
    patient_id = serializers.PrimaryKeyRelatedField(
        source='patient',
        queryset=Patient.objects.filter(is_deleted=False),
    )
    visits = TreatmentVisitSerializer(many=True, required=False)

    class Meta:
        model = TreatmentPlan
        fields = [
            'id',
            'patient_id',
            'title',
            'description',
            'start_date',
            'end_date',
            'status',
            'priority',
            'estimated_cost',
            'ai_generated',
            'visits',
            'is_deleted',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'is_deleted', 'created_at', 'updated_at']

    def validate_start_date(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Start date is required')
        return value

    def validate_visits(self, value):
        if self.instance is not None:
            raise serializers.ValidationError(
                'Visits cannot be replaced here. Use the visits endpoint.'
            )

        numbers = [visit.get('visit_number') for visit in value if visit.get('visit_number')]
        if len(numbers) != len(set(numbers)):
            raise serializers.ValidationError('Visit numbers must be unique within a plan')
        return value

    def create(self, validated_data):
        """Create plan with nested visits, numbering unnumbered ones in order."""
        visits_data = validated_data.pop('visits', [])

        with transaction.atomic():
            plan = TreatmentPlan.objects.create(**validated_data)

            taken = {visit['visit_number'] for visit in visits_data if visit.get('visit_number')}
            next_number = 1
            for visit_data in visits_data:
                if not visit_data.get('visit_number'):
                    while next_number in taken:
                        next_number += 1
                    visit_data['visit_number'] = next_number
                    taken.add(next_number)
                TreatmentVisit.objects.create(treatment_plan=plan, **visit_data)

        return plan


class ProjectedVisitSerializer(serializers.Serializer):
    """Read-only rendering of one projected visit (see SchedulingService)."""
    id = serializers.UUIDField(allow_null=True)
    visit_number = serializers.IntegerField()
    procedures = serializers.CharField(allow_blank=True)
    time_gap = serializers.CharField(allow_null=True)
    status = serializers.CharField()
    estimated_date = serializers.DateField(allow_null=True)
    display_date = serializers.CharField(allow_blank=True)
    date_source = serializers.CharField()


class PlanProjectionSerializer(serializers.Serializer):
    plan_id = serializers.UUIDField()
    start_date = serializers.CharField(allow_blank=True)
    start_date_valid = serializers.BooleanField()
    progress = serializers.IntegerField()
    visits = ProjectedVisitSerializer(many=True)


# ============================================================================
# Calendar
# ============================================================================


class CalendarQuerySerializer(serializers.Serializer):
    """Query parameters of GET /calendar/."""
    view = serializers.ChoiceField(choices=['day', 'week', 'month'], default='week')
    date = serializers.DateField(required=False)
    practitioner_id = serializers.UUIDField(required=False)
    include_cancelled = serializers.BooleanField(required=False, default=True)

    def validate(self, attrs):
        anchor = attrs.get('date')
        if anchor is None:
            return attrs
        try:
            days = visible_days(CalendarView(attrs['view'], anchor))
        except (OverflowError, ValueError):
            days = None
        # The range is widened by a day and shifted by the clinic offset downstream
        if days is None or days[0] <= date.min or days[-1] >= date.max:
            raise serializers.ValidationError({'date': ['Date is outside the supported calendar range.']})
        return attrs


class CalendarAppointmentSerializer(serializers.Serializer):
    """Times are rendered in clinic time, with their UTC offset."""
    id = serializers.CharField()
    start = serializers.SerializerMethodField()
    end = serializers.SerializerMethodField()
    patient_name = serializers.CharField()
    staff_name = serializers.CharField()
    type = serializers.CharField()
    status = serializers.CharField()
    duration_minutes = serializers.FloatField()

    def get_start(self, obj):
        return obj.start.isoformat()

    def get_end(self, obj):
        return obj.end.isoformat()


class CalendarBlockSerializer(serializers.Serializer):
    """An appointment placed in one hour cell of the day/week grid."""
    appointment = CalendarAppointmentSerializer()
    offset = serializers.FloatField()
    height = serializers.FloatField()
    column = serializers.IntegerField()
    column_count = serializers.IntegerField()
    is_anchor = serializers.BooleanField()


class DaySummarySerializer(serializers.Serializer):
    in_month = serializers.BooleanField()
    appointments = CalendarAppointmentSerializer(many=True)
    hidden_count = serializers.IntegerField()
    total_count = serializers.IntegerField()
    active_count = serializers.IntegerField()


class CalendarSerializer(serializers.BaseSerializer):
    """
    Read-only rendering of a CalendarIndex.

    Slots are keyed "YYYY-MM-DDTHH:00" in the day/week grid and "YYYY-MM-DD"
    in the month grid; every slot of the visible range is present.
    """

    def to_representation(self, index):
        config = index.config
        month = index.view.granularity.value == 'month'
        item_serializer = CalendarAppointmentSerializer if month else CalendarBlockSerializer

        data = {
            'view': index.view.granularity.value,
            'date': index.view.anchor.isoformat(),
            'range_start': index.range_start.isoformat(),
            'range_end': index.range_end.isoformat(),
            'time_zone': self.context.get('time_zone'),
            'grid': {
                'first_hour': config.first_hour,
                'last_hour': config.last_hour,
                'cell_height': config.cell_height,
                'min_height': config.min_height,
                'month_cap': config.month_cap,
            },
            'days': [day.isoformat() for day in index.days],
            'slots': {
                key.label(): item_serializer(items, many=True).data
                for key, items in index.slots.items()
            },
        }

        if month:
            data['summaries'] = {
                day.isoformat(): DaySummarySerializer(summary).data
                for day, summary in index.summaries.items()
            }

        return data
