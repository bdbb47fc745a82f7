"""
Clinical viewsets: patients, appointments, treatment plans and the calendar.
"""
import logging
from datetime import datetime

from django.db.models import Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.authz.models import RoleChoices
from apps.authz.permissions import user_role_names
from apps.clinical.models import Appointment, Patient, TreatmentPlan
from apps.clinical.permissions import (
    AppointmentPermission,
    CalendarPermission,
    PatientPermission,
    TreatmentPlanPermission,
)
from apps.clinical.scheduling import CalendarView as CalendarRange
from apps.clinical.serializers import (
    AppointmentListSerializer,
    AppointmentWriteSerializer,
    CalendarQuerySerializer,
    CalendarSerializer,
    PatientDetailSerializer,
    PatientListSerializer,
    PlanProjectionSerializer,
    TreatmentPlanDetailSerializer,
    TreatmentPlanListSerializer,
    TreatmentVisitSerializer,
)
from apps.clinical.services import SchedulingService

logger = logging.getLogger(__name__)


class SoftDeleteMixin:
    """
    DELETE marks the row deleted instead of removing it.

    Admin may list deleted rows with ?include_deleted=true.
    """

    def include_deleted(self):
        requested = self.request.query_params.get('include_deleted', 'false').lower() == 'true'
        return requested and RoleChoices.ADMIN in user_role_names(self.request.user)

    def perform_destroy(self, instance):
        instance.is_deleted = True
        instance.deleted_at = timezone.now()
        instance.save(update_fields=['is_deleted', 'deleted_at', 'updated_at'])
        logger.info(
            'Soft-deleted %s', instance.__class__.__name__,
            extra={'event': 'soft_delete', 'entity_type': instance.__class__.__name__,
                   'entity_id': str(instance.pk)}
        )


class PatientViewSet(SoftDeleteMixin, viewsets.ModelViewSet):
    """
    ViewSet for Patient endpoints.

    Endpoints:
    - POST /api/v1/clinical/patients/
    - GET /api/v1/clinical/patients/?q=
    - GET /api/v1/clinical/patients/{id}/
    - PATCH /api/v1/clinical/patients/{id}/
    - DELETE /api/v1/clinical/patients/{id}/ (Admin only, soft delete)
    """
    permission_classes = [PatientPermission]
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        queryset = Patient.objects.all()

        if not self.include_deleted():
            queryset = queryset.filter(is_deleted=False)

        q = self.request.query_params.get('q')
        if q:
            queryset = queryset.filter(
                Q(first_name__icontains=q) |
                Q(last_name__icontains=q) |
                Q(email__icontains=q) |
                Q(phone__icontains=q)
            )

        return queryset.order_by('last_name', 'first_name')

    def get_serializer_class(self):
        if self.action == 'list':
            return PatientListSerializer
        return PatientDetailSerializer


class AppointmentViewSet(SoftDeleteMixin, viewsets.ModelViewSet):
    """
    ViewSet for Appointment endpoints.

    Endpoints:
    - POST /api/v1/clinical/appointments/
    - GET /api/v1/clinical/appointments/
    - GET /api/v1/clinical/appointments/{id}/
    - PATCH /api/v1/clinical/appointments/{id}/
    - DELETE /api/v1/clinical/appointments/{id}/ (Admin only, soft delete)

    Filters:
    - date_from / date_to: YYYY-MM-DD or ISO datetime, on start_time (inclusive)
    - practitioner_id, patient_id, status
    """
    permission_classes = [AppointmentPermission]
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        queryset = Appointment.objects.select_related('patient', 'practitioner')

        if not self.include_deleted():
            queryset = queryset.filter(is_deleted=False)

        params = self.request.query_params

        status_filter = params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)

        date_from = params.get('date_from')
        if date_from:
            queryset = self._filter_bound(queryset, 'date_from', date_from, 'gte')

        date_to = params.get('date_to')
        if date_to:
            queryset = self._filter_bound(queryset, 'date_to', date_to, 'lte')

        patient_id = params.get('patient_id')
        if patient_id:
            queryset = queryset.filter(patient_id=patient_id)

        practitioner_id = params.get('practitioner_id')
        if practitioner_id:
            queryset = queryset.filter(practitioner_id=practitioner_id)

        return queryset.order_by('start_time')

    @staticmethod
    def _filter_bound(queryset, name, value, lookup):
        """A bare date compares against the start date, a datetime against the instant."""
        try:
            # parse_datetime also accepts a bare date on newer Pythons, so dates go first
            day = parse_date(value)
            if day is not None:
                return queryset.filter(**{f'start_time__date__{lookup}': day})

            moment = parse_datetime(value)
            if moment is not None:
                return queryset.filter(**{f'start_time__{lookup}': moment})
        except ValueError:
            # Well formed but not a real date, e.g. 2024-02-30
            pass

        raise ValidationError({name: [f'Invalid date "{value}". Use YYYY-MM-DD.']})

    def get_serializer_class(self):
        if self.action in ('list', 'retrieve'):
            return AppointmentListSerializer
        return AppointmentWriteSerializer

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)

        response_serializer = AppointmentListSerializer(serializer.instance)
        return Response(response_serializer.data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        self.perform_update(serializer)

        return Response(AppointmentListSerializer(serializer.instance).data)


class TreatmentPlanViewSet(SoftDeleteMixin, viewsets.ModelViewSet):
    """
    ViewSet for TreatmentPlan endpoints.

    Endpoints:
    - POST /api/v1/clinical/treatment-plans/ (visits may be nested)
    - GET /api/v1/clinical/treatment-plans/?patient_id=&status=
    - GET /api/v1/clinical/treatment-plans/{id}/
    - PATCH /api/v1/clinical/treatment-plans/{id}/
    - DELETE /api/v1/clinical/treatment-plans/{id}/ (Admin only, soft delete)
    - GET /api/v1/clinical/treatment-plans/{id}/projection/
    - GET/POST /api/v1/clinical/treatment-plans/{id}/visits/
    - PATCH/DELETE /api/v1/clinical/treatment-plans/{id}/visits/{visit_id}/
    """
    permission_classes = [TreatmentPlanPermission]
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        queryset = TreatmentPlan.objects.select_related('patient').prefetch_related('visits')

        if not self.include_deleted():
            queryset = queryset.filter(is_deleted=False)

        patient_id = self.request.query_params.get('patient_id')
        if patient_id:
            queryset = queryset.filter(patient_id=patient_id)

        status_filter = self.request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)

        return queryset.order_by('-created_at')

    def get_serializer_class(self):
        if self.action == 'list':
            return TreatmentPlanListSerializer
        return TreatmentPlanDetailSerializer

    @action(detail=True, methods=['get'], url_path='projection')
    def projection(self, request, pk=None):
        """Estimated date of every visit, chained from the plan start date."""
        plan = self.get_object()
        data = SchedulingService().project_plan(plan)
        return Response(PlanProjectionSerializer(data).data)

    @action(detail=True, methods=['get', 'post'], url_path='visits')
    def visits(self, request, pk=None):
        """
        GET: visits of the plan in visit_number order.
        POST: add a visit; visit_number defaults to the next free number.
        """
        plan = self.get_object()

        if request.method == 'GET':
            serializer = TreatmentVisitSerializer(plan.visits.order_by('visit_number'), many=True)
            return Response(serializer.data)

        serializer = TreatmentVisitSerializer(
            data=request.data,
            context={'request': request, 'treatment_plan': plan},
        )
        serializer.is_valid(raise_exception=True)

        visit_number = serializer.validated_data.get('visit_number')
        if visit_number is None:
            last = plan.visits.order_by('-visit_number').values_list('visit_number', flat=True).first()
            visit_number = (last or 0) + 1

        serializer.save(treatment_plan=plan, visit_number=visit_number)
        return Response(serializer.data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['patch', 'delete'], url_path=r'visits/(?P<visit_id>[^/.]+)')
    def visit_detail(self, request, pk=None, visit_id=None):
        plan = self.get_object()
        visit = get_object_or_404(plan.visits, pk=visit_id)

        if request.method == 'DELETE':
            visit.delete()
            return Response(status=status.HTTP_204_NO_CONTENT)

        serializer = TreatmentVisitSerializer(
            visit,
            data=request.data,
            partial=True,
            context={'request': request, 'treatment_plan': plan},
        )
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)


class CalendarView(APIView):
    """
    GET /api/v1/clinical/calendar/?view=day|week|month&date=YYYY-MM-DD

    Optional: practitioner_id, include_cancelled (default true).
    date defaults to today in the clinic timezone.
    """
    permission_classes = [CalendarPermission]

    def get(self, request):
        query = CalendarQuerySerializer(data=request.query_params.dict())
        query.is_valid(raise_exception=True)
        params = query.validated_data

        service = SchedulingService()
        anchor = params.get('date') or datetime.now(service.tz).date()

        index = service.build_calendar(
            CalendarRange(params['view'], anchor),
            practitioner_id=params.get('practitioner_id'),
            include_cancelled=params['include_cancelled'],
        )

        serializer = CalendarSerializer(index, context={'time_zone': service.tz.zone})
        return Response(serializer.data)
