"""
Выбор ревьюверов. Функции чистые: работают со списком участников команды
и не обращаются к базе. Источник случайности передается явно, по умолчанию -
SystemRandom, чтобы выбор не был воспроизводимым между вызовами
"""
import random

DEFAULT_MAX_REVIEWERS = 2

_system_random = random.SystemRandom()


def eligible_reviewers(members, exclude_ids=()) -> list:
    """Активные участники, не входящие в exclude_ids, в исходном порядке"""
    excluded = set(exclude_ids)
    return [member for member in members if member.is_active and member.id not in excluded]


def select_reviewers(members, author_id: str, max_count: int = DEFAULT_MAX_REVIEWERS, rng=None) -> list:
    """
    Выбирает до max_count ревьюверов для нового PR: только активные участники,
    автор исключается. Если кандидатов не больше max_count - возвращаются все,
    иначе случайная выборка без повторений
    """
    rng = rng or _system_random
    candidates = eligible_reviewers(members, exclude_ids=[author_id])

    if len(candidates) <= max_count:
        return candidates

    return rng.sample(candidates, max_count)


def replacement_candidates(members, old_reviewer_id: str, author_id: str, assigned_ids) -> list:
    """Кандидаты на замену ревьювера: без неактивных, автора, заменяемого и уже назначенных"""
    return eligible_reviewers(members, exclude_ids=[old_reviewer_id, author_id, *assigned_ids])


def pick_replacement(candidates, rng=None):
    rng = rng or _system_random
    return rng.choice(candidates)
