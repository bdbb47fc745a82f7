"""
Scheduling service.

Bridges the ORM and the pure scheduling functions in
apps.clinical.scheduling: loads rows, converts them to value objects in the
clinic's timezone, runs projection / calendar indexing, and records logs,
domain events and metrics around them.
"""
import time as time_module
from datetime import datetime, time, timedelta
from typing import Any, Dict, List, Optional

import pytz
from django.conf import settings

from apps.clinical.models import Appointment, AppointmentStatusChoices, VisitStatusChoices
from apps.clinical.scheduling import (
    DISPLAY_DATE_FORMAT,
    CalendarAppointment,
    CalendarIndex,
    CalendarView,
    GridConfig,
    Visit,
    coerce_date,
    index_appointments,
    parse_time_gap,
    project_visit_dates,
    visible_days,
)
from apps.core.observability import metrics
from apps.core.observability.events import (
    log_appointment_interval_invalid,
    log_calendar_indexed,
    log_plan_projected,
    log_plan_start_date_unparseable,
)


def grid_config_from_settings() -> GridConfig:
    """
    Build the calendar grid constants from settings.SCHEDULING.

    Raises:
        ValueError: the configured window or sizes are invalid
    """
    conf = settings.SCHEDULING
    return GridConfig(
        first_hour=int(conf['CALENDAR_FIRST_HOUR']),
        last_hour=int(conf['CALENDAR_LAST_HOUR']),
        cell_height=float(conf['CALENDAR_CELL_HEIGHT']),
        min_height=float(conf['CALENDAR_MIN_BLOCK_HEIGHT']),
        month_cap=int(conf['MONTH_VIEW_CAP']),
    )


def clinic_timezone():
    return pytz.timezone(settings.CLINIC_TIME_ZONE)


def plan_progress(completed: int, total: int) -> int:
    """Completed share of a plan as a whole percentage, halves rounded up."""
    if total <= 0:
        return 0
    return (200 * completed + total) // (2 * total)


class SchedulingService:
    """
    Treatment plan projection and calendar building.

    Stateless apart from configuration; safe to share between requests.
    """

    def __init__(self, grid_config: Optional[GridConfig] = None, tz=None, date_format: Optional[str] = None):
        self.grid_config = grid_config or grid_config_from_settings()
        self.tz = tz or clinic_timezone()
        self.date_format = date_format or settings.SCHEDULING.get('DISPLAY_DATE_FORMAT', DISPLAY_DATE_FORMAT)

    # ------------------------------------------------------------------
    # Treatment plans
    # ------------------------------------------------------------------

    @staticmethod
    def plan_visits(plan) -> List[Visit]:
        """Visits of a plan as value objects, in visit_number order."""
        return [
            Visit(
                visit_number=visit.visit_number,
                time_gap=visit.time_gap,
                scheduled_date=visit.scheduled_date,
                payload=visit,
            )
            for visit in plan.visits.order_by('visit_number')
        ]

    def plan_progress(self, plan) -> int:
        total = plan.visits.count()
        completed = plan.visits.filter(status=VisitStatusChoices.COMPLETED).count()
        return plan_progress(completed, total)

    def project_plan(self, plan) -> Dict[str, Any]:
        """
        Estimated dates for every visit of a plan.

        Returns a dict ready for PlanProjectionSerializer. When the plan
        start date cannot be read, visits without a scheduled date show the
        raw start value and have no estimated date.
        """
        visits = self.plan_visits(plan)
        self._count_time_gaps(visits)

        projected = project_visit_dates(plan.start_date, visits, date_format=self.date_format)

        start_valid = coerce_date(plan.start_date) is not None
        if not start_valid:
            log_plan_start_date_unparseable(plan)
        metrics.visit_projection_total.labels(
            result='success' if start_valid else 'unresolved_start'
        ).inc()

        unresolved = sum(1 for item in projected if item.estimated_date is None)
        log_plan_projected(plan, visit_count=len(projected), unresolved_count=unresolved)

        return {
            'plan_id': plan.id,
            'start_date': plan.start_date or '',
            'start_date_valid': start_valid,
            'progress': self.plan_progress(plan),
            'visits': [
                {
                    'id': item.visit.payload.id,
                    'visit_number': item.visit.visit_number,
                    'procedures': item.visit.payload.procedures,
                    'time_gap': item.visit.time_gap,
                    'status': item.visit.payload.status,
                    'estimated_date': item.estimated_date,
                    'display_date': item.display,
                    'date_source': item.source,
                }
                for item in projected
            ],
        }

    @staticmethod
    def _count_time_gaps(visits: List[Visit]):
        for visit in visits:
            if not visit.time_gap:
                result = 'empty'
            elif parse_time_gap(visit.time_gap) is None:
                result = 'unparseable'
            else:
                result = 'parsed'
            metrics.time_gap_parse_total.labels(result=result).inc()

    # ------------------------------------------------------------------
    # Calendar
    # ------------------------------------------------------------------

    def visible_range(self, view: CalendarView):
        """Aware [start, end) datetimes covering the days of a view."""
        days = visible_days(view)
        start = self.tz.localize(datetime.combine(days[0], time.min))
        end = self.tz.localize(datetime.combine(days[-1] + timedelta(days=1), time.min))
        return start, end

    def build_calendar(
        self,
        view: CalendarView,
        practitioner_id=None,
        include_cancelled: bool = True,
    ) -> CalendarIndex:
        """
        Fetch the appointments visible in ``view`` and index them.

        Rows whose end is not after their start are skipped with a warning
        event; the indexer assumes end > start.
        """
        range_start, range_end = self.visible_range(view)

        queryset = Appointment.objects.select_related('patient', 'practitioner').filter(
            is_deleted=False,
            start_time__lt=range_end,
            end_time__gt=range_start,
        )
        if practitioner_id:
            queryset = queryset.filter(practitioner_id=practitioner_id)
        if not include_cancelled:
            queryset = queryset.exclude(status=AppointmentStatusChoices.CANCELLED)

        appointments = []
        for appointment in queryset:
            if appointment.end_time <= appointment.start_time:
                metrics.calendar_invalid_interval_total.inc()
                log_appointment_interval_invalid(appointment)
                continue
            appointments.append(self.to_calendar_appointment(appointment))

        started = time_module.perf_counter()
        index = index_appointments(appointments, view, self.grid_config)
        duration = time_module.perf_counter() - started

        metrics.calendar_index_duration_seconds.labels(view=view.granularity.value).observe(duration)
        log_calendar_indexed(
            view,
            appointment_count=len(appointments),
            slot_count=len(index),
            duration_ms=round(duration * 1000, 2),
            practitioner_id=practitioner_id,
        )

        return index

    def to_calendar_appointment(self, appointment) -> CalendarAppointment:
        """Convert an Appointment row to clinic wall-clock time."""
        return CalendarAppointment(
            id=str(appointment.id),
            start=appointment.start_time.astimezone(self.tz),
            end=appointment.end_time.astimezone(self.tz),
            patient_name=appointment.patient.full_name if appointment.patient_id else '',
            staff_name=appointment.practitioner.display_name if appointment.practitioner_id else '',
            type=appointment.type,
            status=appointment.status,
        )
