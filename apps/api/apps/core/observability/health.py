"""
Health check endpoints.

/healthz answers as long as the process is up; /readyz also verifies the
database and the scheduling configuration.
"""
import logging

import pytz
from django.conf import settings
from django.db import DatabaseError, connection
from django.http import JsonResponse
from django.views import View

logger = logging.getLogger(__name__)


class HealthzView(View):
    """Liveness: no dependency checks."""

    def get(self, request):
        health_data = {
            'status': 'ok',
            'version': getattr(settings, 'VERSION', 'unknown'),
        }

        commit_hash = getattr(settings, 'COMMIT_HASH', None)
        if commit_hash:
            health_data['commit'] = commit_hash

        return JsonResponse(health_data, status=200)


class ReadyzView(View):
    """
    Readiness check endpoint.

    Returns 503 when any check fails. Failures are logged, never raised.
    """

    def get(self, request):
        checks = {
            'database': self._check_database(),
            'scheduling': self._check_scheduling(),
        }

        all_healthy = all(checks.values())

        response_data = {
            'status': 'ready' if all_healthy else 'not_ready',
            'checks': checks,
        }

        return JsonResponse(response_data, status=200 if all_healthy else 503)

    def _check_database(self):
        try:
            with connection.cursor() as cursor:
                cursor.execute('SELECT 1')
                return True
        except DatabaseError as e:
            logger.error(
                'Database health check failed',
                extra={
                    'event': 'health_check_failed',
                    'check': 'database',
                    'error': str(e)
                }
            )
            return False

    def _check_scheduling(self):
        """Clinic timezone must be known and the calendar grid config valid."""
        from apps.clinical.services import grid_config_from_settings

        try:
            pytz.timezone(settings.CLINIC_TIME_ZONE)
            grid_config_from_settings()
            return True
        except (pytz.UnknownTimeZoneError, ValueError, TypeError, KeyError) as e:
            logger.error(
                'Scheduling configuration check failed',
                extra={
                    'event': 'health_check_failed',
                    'check': 'scheduling',
                    'error': str(e)
                }
            )
            return False
