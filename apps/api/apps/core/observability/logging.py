"""
Structured logging with PHI/PII protection.

Provides filters, formatters, and helpers for safe logging.
"""
import logging
import json
from datetime import datetime, timezone
from .correlation import get_request_id, get_trace_id, get_user_id, get_user_roles


# Fields that should NEVER be logged (PHI/PII)
SENSITIVE_FIELDS = {
    'password',
    'token',
    'access',
    'refresh',
    'secret',
    'api_key',
    'first_name',
    'last_name',
    'full_name',
    'patient_name',
    'email',
    'phone',
    'address',
    'address_line1',
    'birth_date',
    'medical_history',
    'allergies',
    'procedures',
    'notes',
    'description',
}

# Attributes every LogRecord carries; anything else came in through extra={}
_RECORD_ATTRS = set(vars(logging.makeLogRecord({}))) | {'message', 'asctime'}


class CorrelationFilter(logging.Filter):
    """
    Logging filter that injects correlation context into log records.
    """

    def filter(self, record):
        record.request_id = get_request_id() or '-'
        record.trace_id = get_trace_id() or '-'
        record.user_id = get_user_id() or '-'
        record.user_roles = ','.join(get_user_roles()) or '-'
        return True


class SanitizedJSONFormatter(logging.Formatter):
    """
    JSON formatter that sanitizes sensitive fields.
    """

    def format(self, record):
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'request_id': getattr(record, 'request_id', '-'),
            'trace_id': getattr(record, 'trace_id', '-'),
            'user_id': getattr(record, 'user_id', '-'),
            'user_roles': getattr(record, 'user_roles', '-'),
        }

        for key, value in record.__dict__.items():
            if key in log_data or key in _RECORD_ATTRS or key.startswith('_'):
                continue
            if key.lower() in SENSITIVE_FIELDS:
                log_data[key] = '[REDACTED]'
            else:
                log_data[key] = self._sanitize_value(value)

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)

    def _sanitize_value(self, value):
        """Sanitize a value recursively."""
        if isinstance(value, dict):
            return {
                k: '[REDACTED]' if str(k).lower() in SENSITIVE_FIELDS else self._sanitize_value(v)
                for k, v in value.items()
            }
        elif isinstance(value, (list, tuple)):
            return [self._sanitize_value(v) for v in value]
        else:
            return value


def get_sanitized_logger(name):
    """
    Get a logger with correlation filter applied.

    Usage:
        logger = get_sanitized_logger(__name__)
        logger.info('Plan projected', extra={'event': 'treatment_plan_projected'})
    """
    logger = logging.getLogger(name)

    if not any(isinstance(f, CorrelationFilter) for f in logger.filters):
        logger.addFilter(CorrelationFilter())

    return logger


def sanitize_dict(data):
    """
    Sanitize a dictionary by redacting sensitive fields.

    Returns a sanitized copy; non-dict input is returned unchanged.
    """
    if not isinstance(data, dict):
        return data

    sanitized = {}
    for key, value in data.items():
        if str(key).lower() in SENSITIVE_FIELDS:
            sanitized[key] = '[REDACTED]'
        elif isinstance(value, dict):
            sanitized[key] = sanitize_dict(value)
        elif isinstance(value, (list, tuple)):
            sanitized[key] = [
                sanitize_dict(v) if isinstance(v, dict) else v
                for v in value
            ]
        else:
            sanitized[key] = value

    return sanitized
