"""
Pytest configuration for the entire test suite.

Runs the tests against an in-memory SQLite database instead of the
PostgreSQL server the settings point at.
"""
import django
from django.conf import settings


def pytest_configure():
    """Configure Django settings for tests."""
    # Force SQLite for tests (faster, no Docker dependency)
    settings.DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': ':memory:',  # In-memory database for speed
        }
    }
    settings.PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']
    settings.CLINIC_TIME_ZONE = 'UTC'

    # pytest-django has already set Django up, so the connection handler
    # cached the original DATABASES and opened a 'default' connection
    # object; drop both so the override applies.
    from django.db import connections
    connections._settings = None
    connections.__dict__.pop('settings', None)
    if hasattr(connections._connections, 'default'):
        del connections['default']

    django.setup()
