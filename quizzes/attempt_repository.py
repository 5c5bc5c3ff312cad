"""ORM access for quiz attempts and their answer rows."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from django.db import transaction
from django.db.models import DurationField, ExpressionWrapper, F, QuerySet
from django.utils import timezone

from .exceptions import AttemptNotFound, AttemptNotOwned
from .models import QuizAttempt, UserAnswer


def _with_related(queryset: QuerySet) -> QuerySet:
    return queryset.select_related("quiz", "user")


def create_attempt(*, quiz_id: int, user_id: int, started_at: datetime | None = None) -> QuizAttempt:
    attempt = QuizAttempt.objects.create(
        quiz_id=quiz_id,
        user_id=user_id,
        score=0,
        started_at=started_at or timezone.now(),
        completed_at=None,
    )
    return _with_related(QuizAttempt.objects.filter(pk=attempt.pk)).get()


def get_attempt(attempt_id: int) -> QuizAttempt | None:
    return _with_related(QuizAttempt.objects.filter(pk=attempt_id)).first()


def get_owned_attempt(*, attempt_id: int, user_id: int) -> QuizAttempt:
    attempt = get_attempt(attempt_id)
    if attempt is None:
        raise AttemptNotFound()
    if attempt.user_id != user_id:
        raise AttemptNotOwned()
    return attempt


def list_attempts_for_user(user_id: int) -> QuerySet:
    return _with_related(QuizAttempt.objects.filter(user_id=user_id)).order_by("-started_at", "-id")


def ranked_completed_attempts(quiz_id: int) -> QuerySet:
    return (
        _with_related(QuizAttempt.objects.filter(quiz_id=quiz_id, completed_at__isnull=False))
        .annotate(
            duration=ExpressionWrapper(F("completed_at") - F("started_at"), output_field=DurationField()),
        )
        .order_by("-score", "duration", "id")
    )


def completed_attempts_for_user(user_id: int) -> QuerySet:
    return QuizAttempt.objects.filter(user_id=user_id, completed_at__isnull=False)


def answers_for_attempt(attempt_id: int) -> QuerySet:
    return (
        UserAnswer.objects.filter(attempt_id=attempt_id)
        .select_related("question", "choice", "correct_choice")
        .order_by("question__position", "question_id")
    )


def mark_attempt_completed(
    *,
    attempt_id: int,
    score: int,
    question_count: int,
    completed_at: datetime,
    answers: Iterable[UserAnswer],
) -> bool:
    """Complete an in-progress attempt and insert its answers in one transaction.

    Returns False, writing nothing, when the attempt was already completed.
    """
    with transaction.atomic():
        updated = QuizAttempt.objects.filter(pk=attempt_id, completed_at__isnull=True).update(
            score=score,
            question_count=question_count,
            completed_at=completed_at,
        )
        if updated != 1:
            return False
        UserAnswer.objects.bulk_create(list(answers))
    return True
