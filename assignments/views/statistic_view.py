import logging

from rest_framework.decorators import api_view
from rest_framework.response import Response

from ..services import StatsService
from ..serializers import PullRequestReviewerStatSerializer, StatsSerializer
from .responses import server_error_response

logger = logging.getLogger(__name__)


@api_view(['GET'])
def stats_overview(request):
    """
    GET /statistic - Общая статистика системы
    """
    try:
        stats = StatsService.get_review_stats()
        serializer = StatsSerializer(stats)
        return Response(serializer.data)

    except Exception:
        logger.exception("stats_overview failed")
        return server_error_response()


@api_view(['GET'])
def pull_requests_stats(request):
    """GET /pullRequests/stats - Количество ревьюверов по PR"""
    try:
        stats = StatsService.pull_request_reviewer_stats()
        serializer = PullRequestReviewerStatSerializer(stats, many=True)
        return Response({'items': serializer.data})

    except Exception:
        logger.exception("pull_requests_stats failed")
        return server_error_response()
