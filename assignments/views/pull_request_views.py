import logging

from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from .. import errors
from ..services import PullRequestService
from ..serializers import PullRequestSerializer
from .responses import server_error_response, service_error_response

logger = logging.getLogger(__name__)


@api_view(['POST'])
def pullrequest_create(request):
    """POST /pullRequest/create - Создать PR"""
    try:
        pr_id = request.data.get('pull_request_id')
        pr_name = request.data.get('pull_request_name')
        author_id = request.data.get('author_id')

        pr = PullRequestService.create_pull_request(pr_id, pr_name, author_id)
        serializer = PullRequestSerializer(pr)

        return Response({
            'pr': serializer.data
        }, status=status.HTTP_201_CREATED)

    except errors.ServiceError as e:
        return service_error_response(e)
    except Exception:
        logger.exception("pullrequest_create failed")
        return server_error_response()


@api_view(['POST'])
def pullrequest_merge(request):
    """POST /pullRequest/merge - Пометить PR как MERGED"""
    try:
        pr_id = request.data.get('pull_request_id')

        pr = PullRequestService.merge_pull_request(pr_id)
        serializer = PullRequestSerializer(pr)

        return Response({
            'pr': serializer.data
        })

    except errors.ServiceError as e:
        return service_error_response(e)
    except Exception:
        logger.exception("pullrequest_merge failed")
        return server_error_response()


@api_view(['POST'])
def pullrequest_reassign(request):
    """POST /pullRequest/reassign - Переназначить ревьювера"""
    try:
        pr_id = request.data.get('pull_request_id')
        old_user_id = request.data.get('old_user_id')

        pr, new_reviewer = PullRequestService.reassign_reviewer(pr_id, old_user_id)
        serializer = PullRequestSerializer(pr)

        return Response({
            'pr': serializer.data,
            'replaced_by': new_reviewer.id
        })

    except errors.ServiceError as e:
        return service_error_response(e)
    except Exception:
        logger.exception("pullrequest_reassign failed")
        return server_error_response()
