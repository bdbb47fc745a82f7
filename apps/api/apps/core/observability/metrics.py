"""
Prometheus metrics for the clinic API.
"""
from prometheus_client import Counter, Histogram


class MetricsRegistry:
    """
    Central metrics registry.

    Provides typed access to all application metrics.
    """

    def __init__(self):
        self._setup_metrics()

    def _create_counter(self, name, description, labels=None):
        return Counter(name, description, labels or [])

    def _create_histogram(self, name, description, labels=None, buckets=None):
        if buckets:
            return Histogram(name, description, labels or [], buckets=buckets)
        return Histogram(name, description, labels or [])

    def _setup_metrics(self):

        # ===================================================================
        # HTTP Metrics
        # ===================================================================
        self.http_requests_total = self._create_counter(
            'http_requests_total',
            'Total HTTP requests',
            ['method', 'status']
        )

        self.http_request_duration_seconds = self._create_histogram(
            'http_request_duration_seconds',
            'HTTP request duration in seconds',
            ['method'],
            buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
        )

        self.exceptions_total = self._create_counter(
            'exceptions_total',
            'Total exceptions',
            ['exception_type', 'location']
        )

        # ===================================================================
        # Scheduling Metrics
        # ===================================================================
        self.time_gap_parse_total = self._create_counter(
            'time_gap_parse_total',
            'Visit time gaps read during projection',
            ['result']  # parsed, unparseable, empty
        )

        self.visit_projection_total = self._create_counter(
            'visit_projection_total',
            'Treatment plan projections',
            ['result']  # success, unresolved_start
        )

        self.calendar_index_duration_seconds = self._create_histogram(
            'calendar_index_duration_seconds',
            'Duration of calendar slot indexing',
            ['view'],
            buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5]
        )

        self.calendar_invalid_interval_total = self._create_counter(
            'calendar_invalid_interval_total',
            'Appointments skipped by the calendar because end <= start'
        )


# Global metrics instance
metrics = MetricsRegistry()
