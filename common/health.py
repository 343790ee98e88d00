"""
Health Check Endpoints for the rental ledger

Provides endpoints for:
- Liveness checks (is the app running?)
- Readiness checks (can the app serve requests?)
- Deep health checks (database, cache, scheduler, row counts)
"""

import time
import logging
from django.http import JsonResponse
from django.db import connection
from django.core.cache import cache
from django.views.decorators.http import require_GET
from django.views.decorators.csrf import csrf_exempt

logger = logging.getLogger(__name__)


def _check_database():
    start = time.time()
    with connection.cursor() as cursor:
        cursor.execute('SELECT 1')
        cursor.fetchone()
    return round((time.time() - start) * 1000, 2)


def _check_cache(cache_key):
    start = time.time()
    cache.set(cache_key, 'ok', 10)
    ok = cache.get(cache_key) == 'ok'
    cache.delete(cache_key)
    return ok, round((time.time() - start) * 1000, 2)


@csrf_exempt
@require_GET
def health_check(request):
    """
    Basic health check - returns 200 if app is running.
    Used by load balancers and container orchestration.
    """
    return JsonResponse({
        'status': 'healthy',
        'timestamp': time.time(),
    })


@csrf_exempt
@require_GET
def readiness_check(request):
    """
    Readiness check - verifies app can serve requests.
    Checks database and cache connectivity.
    """
    checks = {
        'database': False,
        'cache': False,
    }
    errors = []

    try:
        _check_database()
        checks['database'] = True
    except Exception as e:
        errors.append(f'Database: {str(e)}')
        logger.error(f'Health check - Database error: {e}')

    try:
        checks['cache'], _ = _check_cache('health_check_test')
        if not checks['cache']:
            errors.append('Cache: Failed to read/write')
    except Exception as e:
        errors.append(f'Cache: {str(e)}')
        logger.error(f'Health check - Cache error: {e}')

    all_healthy = all(checks.values())
    return JsonResponse({
        'status': 'ready' if all_healthy else 'not_ready',
        'timestamp': time.time(),
        'checks': checks,
        'errors': errors if errors else None,
    }, status=200 if all_healthy else 503)


@csrf_exempt
@require_GET
def deep_health_check(request):
    """
    Deep health check - comprehensive system status.
    Use sparingly as it may be resource intensive.
    """
    from leases.models import Lease
    from installments.models import Installment
    from payments.models import Payment
    from common import scheduler as background

    checks = {
        'database': {'status': False, 'latency_ms': None},
        'cache': {'status': False, 'latency_ms': None},
        'scheduler': {'running': bool(background.scheduler and background.scheduler.running)},
        'models': {'status': False, 'details': {}},
    }
    errors = []

    try:
        checks['database'] = {'status': True, 'latency_ms': _check_database()}
    except Exception as e:
        errors.append(f'Database: {str(e)}')
        logger.error(f'Deep health check - Database error: {e}')

    try:
        ok, latency = _check_cache('deep_health_check_test')
        checks['cache'] = {'status': ok, 'latency_ms': latency}
        if not ok:
            errors.append('Cache: Read/write failed')
    except Exception as e:
        errors.append(f'Cache: {str(e)}')
        logger.error(f'Deep health check - Cache error: {e}')

    # Model checks (verify DB schema)
    try:
        checks['models'] = {'status': True, 'details': {
            'leases': Lease.objects.count(),
            'installments': Installment.objects.count(),
            'payments': Payment.objects.count(),
        }}
    except Exception as e:
        errors.append(f'Models: {str(e)}')
        logger.error(f'Deep health check - Model error: {e}')

    all_healthy = checks['database']['status'] and checks['cache']['status']
    return JsonResponse({
        'status': 'healthy' if all_healthy else 'unhealthy',
        'timestamp': time.time(),
        'checks': checks,
        'errors': errors if errors else None,
        'version': '1.0.0',
    }, status=200 if all_healthy else 503)


def get_health_urls():
    """
    Returns URL patterns for health endpoints.
    Add to your urls.py:
        from common.health import get_health_urls
        urlpatterns += get_health_urls()
    """
    from django.urls import path

    return [
        path('health/', health_check, name='health_check'),
        path('health/ready/', readiness_check, name='readiness_check'),
        path('health/deep/', deep_health_check, name='deep_health_check'),
    ]
