class ServiceError(Exception):
    """
    Базовая ошибка сервисного слоя. code - стабильный машиночитаемый код для клиента
    """
    code = 'INTERNAL_ERROR'
    default_message = 'internal error'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)

    @property
    def message(self):
        return str(self)


class ValidationError(ServiceError):
    code = 'VALIDATION_ERROR'
    default_message = 'validation error'


class NotFound(ServiceError):
    code = 'NOT_FOUND'
    default_message = 'resource not found'


class AlreadyExists(ServiceError):
    code = 'ALREADY_EXISTS'
    default_message = 'resource already exists'


class TeamAlreadyExists(AlreadyExists):
    code = 'TEAM_EXISTS'
    default_message = 'team_name already exists'


class PullRequestAlreadyExists(AlreadyExists):
    code = 'PR_EXISTS'
    default_message = 'PR id already exists'


class AlreadyMerged(ServiceError):
    code = 'PR_MERGED'
    default_message = 'cannot reassign on merged PR'


class ReviewerNotAssigned(ServiceError):
    code = 'NOT_ASSIGNED'
    default_message = 'reviewer is not assigned to this PR'


class NoReviewerCandidates(ServiceError):
    code = 'NO_CANDIDATE'
    default_message = 'no active replacement candidate in team'


class InternalError(ServiceError):
    code = 'INTERNAL_ERROR'


class InvalidTransition(InternalError):
    def __init__(self, current, target, pr_id=None):
        self.current = current
        self.target = target
        self.pr_id = pr_id
        msg = f"invalid transition from {current} to {target}"
        if pr_id:
            msg += f" for PR '{pr_id}'"
        super().__init__(msg)
