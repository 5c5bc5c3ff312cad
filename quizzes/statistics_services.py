"""Per-user attempt statistics, recomputed from completed attempts."""

from __future__ import annotations

import logging
from typing import Any

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Avg, Count

from .attempt_repository import completed_attempts_for_user
from .models import UserStatistics

logger = logging.getLogger(__name__)


@transaction.atomic
def recompute_user_statistics(user_id: int) -> UserStatistics:
    aggregate = completed_attempts_for_user(user_id).aggregate(
        total=Count("id"),
        average=Avg("score"),
    )
    total = int(aggregate["total"] or 0)
    average = float(aggregate["average"]) if total and aggregate["average"] is not None else 0.0

    statistics, _ = UserStatistics.objects.update_or_create(
        user_id=user_id,
        defaults={
            "total_attempts": total,
            "average_score": average,
        },
    )
    logger.debug("Recomputed statistics for user %s: attempts=%s average=%.2f", user_id, total, average)
    return statistics


def get_statistics_payload(user_id: int) -> dict[str, Any]:
    statistics = UserStatistics.objects.filter(user_id=user_id).first()
    if statistics is None:
        return {
            "user_id": user_id,
            "total_attempts": 0,
            "average_score": 0.0,
            "updated_at": None,
        }
    return {
        "user_id": user_id,
        "total_attempts": statistics.total_attempts,
        "average_score": round(statistics.average_score, 2),
        "updated_at": statistics.updated_at.isoformat(),
    }


def recompute_many(*, usernames: list[str] | None = None) -> int:
    user_model = get_user_model()
    queryset = user_model.objects.all()
    if usernames:
        queryset = queryset.filter(username__in=usernames)
    processed = 0
    for user in queryset.iterator():
        recompute_user_statistics(user.pk)
        processed += 1
    return processed
