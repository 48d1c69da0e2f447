import logging

from django.conf import settings
from django.db import IntegrityError, models, transaction
from django.db.models import Count
from django.utils import timezone

from . import errors
from .models import PullRequest, ReviewerAssignment, Team, User
from .selection import (
    DEFAULT_MAX_REVIEWERS,
    pick_replacement,
    replacement_candidates,
    select_reviewers,
)

logger = logging.getLogger(__name__)


def _reject(exc: errors.ServiceError, **context) -> errors.ServiceError:
    """Логирует отказ по бизнес-правилу и возвращает исключение для raise"""
    details = ' '.join(f"{key}={value}" for key, value in context.items())
    logger.warning("%s: %s %s", exc.code, exc.message, details)
    return exc


class TeamService:
    """
    Сервис для управления командами и пользователями
    """

    @classmethod
    def upsert_team(cls, team_name: str, members_data: list) -> Team:
        """
        Создает команду или полностью заменяет состав существующей.
        Пользователь не может состоять в двух командах одновременно
        """
        if not team_name:
            raise _reject(errors.ValidationError('team_name is required'))

        member_ids = cls._validate_members(members_data)

        logger.info("upserting team %s with %d members", team_name, len(member_ids))

        with transaction.atomic():
            current_teams = cls._lock_members(member_ids)
            for user_id in member_ids:
                existing_team = current_teams.get(user_id)
                if existing_team is not None and existing_team != team_name:
                    raise _reject(
                        errors.ValidationError(f"user '{user_id}' already in team '{existing_team}'"),
                        team_name=team_name,
                    )

            team = cls._get_or_create_team(team_name)

            # Полная замена состава: отсутствующие в запросе участники открепляются
            User.objects.filter(team=team).exclude(id__in=member_ids).update(team=None)

            for member_data in members_data:
                cls._create_or_update_user(team, member_data)

        return cls.get_team_by_name(team_name)

    @classmethod
    def _validate_members(cls, members_data: list) -> list:
        member_ids = []
        seen = set()
        for member_data in members_data:
            user_id = member_data.get('user_id')
            if not user_id:
                raise _reject(errors.ValidationError('member user_id is required'))
            if user_id in seen:
                raise _reject(errors.ValidationError(f"duplicate member '{user_id}'"))
            seen.add(user_id)
            member_ids.append(user_id)
        return member_ids

    @classmethod
    def _lock_members(cls, member_ids: list) -> dict:
        """
        Блокирует строки всех существующих участников из запроса, в том числе без команды,
        и возвращает {user_id: team_name или None}
        """
        locked = (
            User.objects.select_for_update(of=('self',))
            .filter(id__in=member_ids)
            .values_list('id', 'team__name')
        )
        return dict(locked)

    @classmethod
    def _get_or_create_team(cls, team_name: str) -> Team:
        team = Team.objects.filter(name=team_name).first()
        if team is not None:
            return team

        try:
            with transaction.atomic():
                return Team.objects.create(name=team_name)
        except IntegrityError:
            # Команду с тем же именем успели создать параллельно
            raise _reject(errors.TeamAlreadyExists(), team_name=team_name)

    @classmethod
    def _create_or_update_user(cls, team: Team, member_data: dict) -> User:
        user, _ = User.objects.update_or_create(
            id=member_data['user_id'],
            defaults={
                'username': member_data.get('username', ''),
                'is_active': member_data.get('is_active', True),
                'team': team,
            },
        )
        return user

    @classmethod
    def get_team_by_name(cls, team_name: str) -> Team:
        if not team_name:
            raise _reject(errors.ValidationError('team_name is required'))
        try:
            return Team.objects.prefetch_related('members').get(name=team_name)
        except Team.DoesNotExist:
            raise errors.NotFound(f"Team '{team_name}' not found")

    @classmethod
    def get_team_by_member(cls, user_id: str) -> Team:
        if not user_id:
            raise _reject(errors.ValidationError('user_id is required'))
        team = Team.objects.prefetch_related('members').filter(members__id=user_id).first()
        if team is None:
            raise errors.NotFound(f"User '{user_id}' has no team")
        return team


class UserService:
    """
    Сервис для управления пользователями
    """

    @classmethod
    def get_user(cls, user_id: str) -> User:
        if not user_id:
            raise _reject(errors.ValidationError('user_id is required'))
        try:
            return User.objects.select_related('team').get(id=user_id)
        except User.DoesNotExist:
            raise errors.NotFound(f"User '{user_id}' not found")

    @classmethod
    def set_user_active(cls, user_id: str, is_active: bool) -> User:
        if not isinstance(is_active, bool):
            raise _reject(errors.ValidationError('is_active must be a boolean'), user_id=user_id)

        user = cls.get_user(user_id)
        logger.info("setting is_active=%s for user %s", is_active, user_id)

        user.is_active = is_active
        user.save(update_fields=['is_active'])
        return user

    @classmethod
    def get_user_review_assignments(cls, user_id: str) -> list:
        user = cls.get_user(user_id)
        assigned_prs = (
            PullRequest.objects
            .filter(reviewers=user)
            .select_related('author')
            .order_by('-created_at', 'id')
        )
        return list(assigned_prs)


class PullRequestService:
    """
    Сервис для управления Pull Request'ами
    """

    @classmethod
    def get_pull_request(cls, pr_id: str, for_update: bool = False) -> PullRequest:
        queryset = PullRequest.objects.prefetch_related('assignments')
        if for_update:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(id=pr_id)
        except PullRequest.DoesNotExist:
            raise errors.NotFound(f"PR '{pr_id}' not found")

    @classmethod
    def create_pull_request(cls, pr_id: str, pr_name: str, author_id: str, rng=None) -> PullRequest:
        if not all([pr_id, pr_name, author_id]):
            raise _reject(
                errors.ValidationError('pull_request_id, pull_request_name, and author_id are required'),
                pull_request_id=pr_id,
                author_id=author_id,
            )

        logger.info("creating pull request %s for author %s", pr_id, author_id)

        try:
            author = User.objects.select_related('team').get(id=author_id)
        except User.DoesNotExist:
            raise errors.NotFound(f"Author '{author_id}' not found")

        if author.team is None:
            raise errors.NotFound(f"Author '{author_id}' has no team")

        max_count = getattr(settings, 'REVIEWERS_PER_PULL_REQUEST', DEFAULT_MAX_REVIEWERS)
        reviewers = select_reviewers(author.team.members.all(), author.id, max_count, rng=rng)

        # Дубликат id ловим по нарушению уникальности при вставке, а не предварительной проверкой
        try:
            with transaction.atomic():
                pr = PullRequest.objects.create(
                    id=pr_id,
                    name=pr_name,
                    author=author,
                    status=PullRequest.Status.OPEN,
                    created_at=timezone.now(),
                )
                ReviewerAssignment.objects.bulk_create([
                    ReviewerAssignment(pull_request=pr, reviewer=reviewer, slot=slot)
                    for slot, reviewer in enumerate(reviewers)
                ])
        except IntegrityError:
            raise _reject(errors.PullRequestAlreadyExists(), pull_request_id=pr_id)

        return cls.get_pull_request(pr_id)

    @classmethod
    def merge_pull_request(cls, pr_id: str) -> PullRequest:
        """
        Идемпотентный merge: условное обновление OPEN -> MERGED, затем чтение.
        Повторный merge возвращает текущее состояние без ошибки
        """
        if not pr_id:
            raise _reject(errors.ValidationError('pull_request_id is required'))

        logger.info("merging pull request %s", pr_id)

        merged = PullRequest.objects.transition(
            pr_id,
            PullRequest.Status.OPEN,
            PullRequest.Status.MERGED,
            merged_at=timezone.now(),
        )
        pr = cls.get_pull_request(pr_id)

        if not pr.is_merged:
            logger.error("pull request %s in status %s after merge", pr_id, pr.status)
            raise errors.InternalError(f"PR '{pr_id}' has unexpected status {pr.status}")

        if not merged:
            logger.info("pull request %s already merged", pr_id)
        return pr

    @classmethod
    @transaction.atomic
    def reassign_reviewer(cls, pr_id: str, old_user_id: str, rng=None) -> tuple:
        if not all([pr_id, old_user_id]):
            raise _reject(errors.ValidationError('pull_request_id and old_user_id are required'))

        logger.info("reassigning reviewer %s on pull request %s", old_user_id, pr_id)

        pr = cls.get_pull_request(pr_id, for_update=True)

        # Проверяем доменные правила
        if pr.is_merged:
            raise _reject(errors.AlreadyMerged(), pull_request_id=pr_id)

        assigned_ids = pr.assigned_reviewers
        if old_user_id not in assigned_ids:
            raise _reject(errors.ReviewerNotAssigned(), pull_request_id=pr_id, old_user_id=old_user_id)

        # Кандидаты ищутся в текущей команде заменяемого ревьювера, а не автора
        team = TeamService.get_team_by_member(old_user_id)
        candidates = replacement_candidates(team.members.all(), old_user_id, pr.author_id, assigned_ids)

        if not candidates:
            raise _reject(errors.NoReviewerCandidates(), pull_request_id=pr_id, old_user_id=old_user_id)

        new_reviewer = pick_replacement(candidates, rng=rng)

        try:
            with transaction.atomic():
                swapped = ReviewerAssignment.objects.swap(pr_id, old_user_id, new_reviewer.id)
        except IntegrityError:
            # Тот же кандидат уже назначен параллельной операцией
            raise _reject(errors.NoReviewerCandidates(), pull_request_id=pr_id, old_user_id=old_user_id)

        if not swapped:
            current = cls.get_pull_request(pr_id)
            if current.is_merged:
                raise _reject(errors.AlreadyMerged(), pull_request_id=pr_id)
            raise _reject(errors.ReviewerNotAssigned(), pull_request_id=pr_id, old_user_id=old_user_id)

        logger.info("reviewer %s replaced by %s on pull request %s", old_user_id, new_reviewer.id, pr_id)
        return cls.get_pull_request(pr_id), new_reviewer


class StatsService:
    """
    Сервис для сбора статистики
    """

    @classmethod
    def reviewer_assignment_stats(cls) -> list:
        """Количество назначений (открытые и смерженные PR) по каждому ревьюверу"""
        is_open = models.Q(assigned_prs__status=PullRequest.Status.OPEN)
        is_merged = models.Q(assigned_prs__status=PullRequest.Status.MERGED)
        stats = (
            User.objects
            .filter(assigned_prs__isnull=False)
            .annotate(
                assignments=Count('assigned_prs'),
                open_assignments=Count('assigned_prs', filter=is_open),
                merged_assignments=Count('assigned_prs', filter=is_merged),
            )
            .order_by('-assignments', 'id')
        )
        return [
            {
                'reviewer_id': user.id,
                'username': user.username,
                'assignments': user.assignments,
                'open_assignments': user.open_assignments,
                'merged_assignments': user.merged_assignments,
            }
            for user in stats
        ]

    @classmethod
    def pull_request_reviewer_stats(cls) -> list:
        """Количество ревьюверов по каждому PR"""
        stats = (
            PullRequest.objects
            .annotate(
                reviewers_count=Count('reviewers'),
                team_name=models.F('author__team__name'),
            )
            .order_by('-created_at', 'id')
        )
        return [
            {
                'pull_request_id': pr.id,
                'pull_request_name': pr.name,
                'status': pr.status,
                'team_name': pr.team_name,
                'reviewers': pr.reviewers_count,
                'created_at': pr.created_at,
                'merged_at': pr.merged_at,
            }
            for pr in stats
        ]

    @classmethod
    def get_review_stats(cls) -> dict:
        return {
            'user_review_stats': cls.reviewer_assignment_stats(),
            'pr_reviewer_stats': cls.pull_request_reviewer_stats(),
        }
