import logging

from rest_framework import status
from rest_framework.response import Response

logger = logging.getLogger(__name__)

HTTP_STATUS_BY_CODE = {
    'VALIDATION_ERROR': status.HTTP_400_BAD_REQUEST,
    'TEAM_EXISTS': status.HTTP_400_BAD_REQUEST,
    'NOT_FOUND': status.HTTP_404_NOT_FOUND,
    'PR_EXISTS': status.HTTP_409_CONFLICT,
    'PR_MERGED': status.HTTP_409_CONFLICT,
    'NOT_ASSIGNED': status.HTTP_409_CONFLICT,
    'NO_CANDIDATE': status.HTTP_409_CONFLICT,
}


def error_response(code, message, http_status):
    return Response({
        'error': {
            'code': code,
            'message': message
        }
    }, status=http_status)


def validation_error_response(message):
    return error_response('VALIDATION_ERROR', message, status.HTTP_400_BAD_REQUEST)


def service_error_response(exc):
    """Ошибка сервисного слоя -> HTTP ответ по ее коду"""
    http_status = HTTP_STATUS_BY_CODE.get(exc.code)
    if http_status is None:
        logger.error("internal service error: %s", exc)
        return server_error_response()
    return error_response(exc.code, exc.message, http_status)


def server_error_response():
    return error_response('INTERNAL_ERROR', 'Internal server error', status.HTTP_500_INTERNAL_SERVER_ERROR)


def first_error_message(serializer_errors):
    """Первое сообщение об ошибке из вложенной структуры serializer.errors"""
    if isinstance(serializer_errors, dict):
        for field, value in serializer_errors.items():
            message = first_error_message(value)
            if message:
                return f"{field}: {message}"
    elif isinstance(serializer_errors, list):
        for value in serializer_errors:
            message = first_error_message(value)
            if message:
                return message
    elif serializer_errors:
        return str(serializer_errors)
    return None
