import logging

from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from .. import errors
from ..services import TeamService
from ..serializers import TeamInputSerializer, TeamSerializer
from .responses import (
    first_error_message,
    server_error_response,
    service_error_response,
    validation_error_response,
)

logger = logging.getLogger(__name__)


@api_view(['POST'])
def team_add(request):
    """POST /team/add - Создать команду или заменить ее состав, в обоих случаях 201"""
    try:
        payload = TeamInputSerializer(data=request.data)
        if not payload.is_valid():
            return validation_error_response(first_error_message(payload.errors))

        team = TeamService.upsert_team(
            payload.validated_data['team_name'],
            payload.validated_data.get('members', []),
        )
        serializer = TeamSerializer(team)

        return Response({
            'team': serializer.data
        }, status=status.HTTP_201_CREATED)

    except errors.ServiceError as e:
        return service_error_response(e)
    except Exception:
        logger.exception("team_add failed")
        return server_error_response()


@api_view(['GET'])
def team_get(request):
    """GET /team/get - Получить команду с участниками"""
    try:
        team_name = request.query_params.get('team_name')

        team = TeamService.get_team_by_name(team_name)
        serializer = TeamSerializer(team)

        return Response(serializer.data)

    except errors.ServiceError as e:
        return service_error_response(e)
    except Exception:
        logger.exception("team_get failed")
        return server_error_response()


@api_view(['GET'])
def team_get_by_member(request):
    """GET /team/getByMember - Получить команду пользователя"""
    try:
        user_id = request.query_params.get('user_id')

        team = TeamService.get_team_by_member(user_id)
        serializer = TeamSerializer(team)

        return Response(serializer.data)

    except errors.ServiceError as e:
        return service_error_response(e)
    except Exception:
        logger.exception("team_get_by_member failed")
        return server_error_response()
