from .team_views import team_add, team_get, team_get_by_member
from .user_views import user_set_active, users_get_review, users_stats
from .pull_request_views import pullrequest_create, pullrequest_merge, pullrequest_reassign
from .statistic_view import stats_overview, pull_requests_stats
from .health_views import health_check

__all__ = [
    'team_add', 'team_get', 'team_get_by_member',
    'user_set_active', 'users_get_review', 'users_stats',
    'pullrequest_create', 'pullrequest_merge', 'pullrequest_reassign',
    'stats_overview', 'pull_requests_stats',
    'health_check'
]
