import logging

from rest_framework.decorators import api_view
from rest_framework.response import Response

from .. import errors
from ..services import StatsService, UserService
from ..serializers import (
    PullRequestShortSerializer,
    ReviewerAssignmentStatSerializer,
    UserSerializer,
)
from .responses import server_error_response, service_error_response, validation_error_response

logger = logging.getLogger(__name__)


@api_view(['POST'])
def user_set_active(request):
    """POST /users/setIsActive - Установить флаг активности пользователя"""
    try:
        user_id = request.data.get('user_id')
        is_active = request.data.get('is_active')

        if user_id is None or is_active is None:
            return validation_error_response('user_id and is_active are required')

        user = UserService.set_user_active(user_id, is_active)
        serializer = UserSerializer(user)

        return Response({
            'user': serializer.data
        })

    except errors.ServiceError as e:
        return service_error_response(e)
    except Exception:
        logger.exception("user_set_active failed")
        return server_error_response()


@api_view(['GET'])
def users_get_review(request):
    """GET /users/getReview - Получить PR'ы, где пользователь назначен ревьювером"""
    try:
        user_id = request.query_params.get('user_id')

        assigned_prs = UserService.get_user_review_assignments(user_id)
        serializer = PullRequestShortSerializer(assigned_prs, many=True)

        return Response({
            'user_id': user_id,
            'pull_requests': serializer.data
        })

    except errors.ServiceError as e:
        return service_error_response(e)
    except Exception:
        logger.exception("users_get_review failed")
        return server_error_response()


@api_view(['GET'])
def users_stats(request):
    """GET /users/stats - Количество назначений по ревьюверам"""
    try:
        stats = StatsService.reviewer_assignment_stats()
        serializer = ReviewerAssignmentStatSerializer(stats, many=True)
        return Response({'items': serializer.data})

    except Exception:
        logger.exception("users_stats failed")
        return server_error_response()
