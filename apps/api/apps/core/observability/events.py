"""
Domain events logging helpers.

Provides structured event logging for scheduling operations.
"""
from typing import Dict, Optional
from .logging import get_sanitized_logger, sanitize_dict

logger = get_sanitized_logger(__name__)


def log_domain_event(
    event_name: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    entity_ids: Optional[Dict[str, str]] = None,
    result: str = 'success',
    **extra_fields
):
    """
    Log a domain event with structured data.

    Args:
        event_name: Name of the event (e.g., 'treatment_plan_projected')
        entity_type: Type of entity (e.g., 'TreatmentPlan', 'Appointment')
        entity_id: ID of primary entity
        entity_ids: Dictionary of related entity IDs
        result: Result of operation (success, warning, failure, ...)
        **extra_fields: Additional fields to log (will be sanitized)

    Example:
        log_domain_event(
            'treatment_plan_projected',
            entity_type='TreatmentPlan',
            entity_id=str(plan.id),
            entity_ids={'patient_id': str(plan.patient_id)},
            visit_count=4,
        )
    """
    event_data = {
        'event': event_name,
        'result': result,
    }

    if entity_type:
        event_data['entity_type'] = entity_type

    if entity_id:
        event_data['entity_id'] = entity_id

    if entity_ids:
        event_data.update(entity_ids)

    event_data.update(sanitize_dict(extra_fields))

    # Log at appropriate level based on result
    if result in ['failure', 'error']:
        logger.error(f'Domain event: {event_name}', extra=event_data)
    elif result in ['warning', 'blocked', 'skipped']:
        logger.warning(f'Domain event: {event_name}', extra=event_data)
    else:
        logger.info(f'Domain event: {event_name}', extra=event_data)


def log_plan_projected(plan, visit_count, unresolved_count=0):
    """Log a treatment plan date projection."""
    log_domain_event(
        'treatment_plan_projected',
        entity_type='TreatmentPlan',
        entity_id=str(plan.id),
        entity_ids={'patient_id': str(plan.patient_id)},
        visit_count=visit_count,
        unresolved_count=unresolved_count,
    )


def log_plan_start_date_unparseable(plan):
    """Log a plan whose start date cannot be read as a calendar date."""
    log_domain_event(
        'plan_start_date_unparseable',
        entity_type='TreatmentPlan',
        entity_id=str(plan.id),
        result='warning',
        start_date_length=len(plan.start_date or ''),
    )


def log_calendar_indexed(view, appointment_count, slot_count, duration_ms, practitioner_id=None):
    """Log a calendar index build."""
    extra = {
        'view': view.granularity.value,
        'anchor': view.anchor.isoformat(),
        'appointment_count': appointment_count,
        'slot_count': slot_count,
        'duration_ms': duration_ms,
    }
    if practitioner_id:
        extra['practitioner_id'] = str(practitioner_id)

    log_domain_event('calendar_indexed', entity_type='Calendar', **extra)


def log_appointment_interval_invalid(appointment):
    """Log an appointment skipped by the calendar because end <= start."""
    log_domain_event(
        'appointment_interval_invalid',
        entity_type='Appointment',
        entity_id=str(appointment.id),
        result='skipped',
        start_time=appointment.start_time.isoformat() if appointment.start_time else None,
        end_time=appointment.end_time.isoformat() if appointment.end_time else None,
    )
