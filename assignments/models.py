from django.db import models
from django.utils import timezone

from .errors import InvalidTransition


class Team(models.Model):
    name = models.CharField(max_length=100, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'teams'


class User(models.Model):
    id = models.CharField(max_length=50, primary_key=True)
    username = models.CharField(max_length=100)
    # Пользователь состоит не более чем в одной команде, при отвязке запись остается
    team = models.ForeignKey(Team, on_delete=models.SET_NULL, related_name='members', null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.username} ({self.id})"

    class Meta:
        db_table = 'users'
        ordering = ['id']


class PullRequestQuerySet(models.QuerySet):

    def transition(self, pr_id: str, from_status: str, to_status: str, **fields) -> bool:
        """
        Условный переход статуса (compare-and-swap): обновляет PR только если текущий
        статус равен from_status. Возвращает True, если строка была изменена
        """
        if to_status not in PullRequest.TRANSITIONS.get(from_status, set()):
            raise InvalidTransition(from_status, to_status, pr_id)

        updated = self.filter(id=pr_id, status=from_status).update(status=to_status, **fields)
        return updated == 1


class PullRequest(models.Model):
    class Status(models.TextChoices):
        OPEN = 'OPEN', 'Open'
        MERGED = 'MERGED', 'Merged'

    # MERGED - терминальное состояние
    TRANSITIONS = {
        Status.OPEN: {Status.MERGED},
        Status.MERGED: set(),
    }

    id = models.CharField(max_length=100, primary_key=True)
    name = models.CharField(max_length=200)
    author = models.ForeignKey(User, on_delete=models.PROTECT, related_name='authored_prs')
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.OPEN)
    reviewers = models.ManyToManyField(
        User,
        through='ReviewerAssignment',
        related_name='assigned_prs',
        blank=True,
    )
    created_at = models.DateTimeField(default=timezone.now)
    merged_at = models.DateTimeField(null=True, blank=True)

    objects = PullRequestQuerySet.as_manager()

    @property
    def is_merged(self) -> bool:
        return self.status == self.Status.MERGED

    @property
    def assigned_reviewers(self) -> list:
        """Идентификаторы ревьюверов в порядке слотов"""
        return [assignment.reviewer_id for assignment in self.assignments.all()]

    def __str__(self):
        return f"{self.name} ({self.id})"

    class Meta:
        db_table = 'pull_requests'


class ReviewerAssignmentQuerySet(models.QuerySet):

    def swap(self, pr_id: str, old_reviewer_id: str, new_reviewer_id: str) -> bool:
        """
        Заменяет ревьювера в его слоте, только пока PR открыт и старый ревьювер
        все еще занимает слот. Возвращает True при успешной замене
        """
        updated = self.filter(
            pull_request_id=pr_id,
            reviewer_id=old_reviewer_id,
            pull_request__status=PullRequest.Status.OPEN,
        ).update(reviewer_id=new_reviewer_id)
        return updated == 1


class ReviewerAssignment(models.Model):
    pull_request = models.ForeignKey(PullRequest, on_delete=models.CASCADE, related_name='assignments')
    reviewer = models.ForeignKey(User, on_delete=models.PROTECT, related_name='review_slots')
    slot = models.PositiveSmallIntegerField()

    objects = ReviewerAssignmentQuerySet.as_manager()

    def __str__(self):
        return f"{self.pull_request_id}[{self.slot}] -> {self.reviewer_id}"

    class Meta:
        db_table = 'pull_request_reviewers'
        ordering = ['slot']
        constraints = [
            models.UniqueConstraint(fields=['pull_request', 'slot'], name='uniq_pr_reviewer_slot'),
            models.UniqueConstraint(fields=['pull_request', 'reviewer'], name='uniq_pr_reviewer'),
        ]
