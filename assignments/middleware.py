"""
HTTP middleware - X-Request-ID и логирование запросов
"""
import logging
import time
import uuid

logger = logging.getLogger(__name__)

SKIP_PATHS = ('/health',)


class RequestLoggingMiddleware:
    """Пробрасывает или генерирует X-Request-ID и логирует метод, путь, статус и длительность"""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request_id = request.headers.get('X-Request-ID') or str(uuid.uuid4())
        request.request_id = request_id

        start = time.monotonic()
        response = self.get_response(request)
        duration_ms = (time.monotonic() - start) * 1000

        response['X-Request-ID'] = request_id
        if request.path not in SKIP_PATHS:
            logger.info(
                "%s %s -> %s in %.1fms request_id=%s",
                request.method, request.path, response.status_code, duration_ms, request_id,
            )
        return response
