"""Services for per-quiz leaderboard ranking."""

from __future__ import annotations

from typing import Any

from django.conf import settings

from .attempt_repository import ranked_completed_attempts
from .attempt_services import attempt_summary_payload
from .exceptions import InvalidTopCount
from .models import QuizAttempt

MIN_TOP_COUNT = 1
MAX_TOP_COUNT = 100


def default_top_count() -> int:
    value = int(getattr(settings, "QUIZ_LEADERBOARD_DEFAULT_TOP", 10))
    return min(MAX_TOP_COUNT, max(MIN_TOP_COUNT, value))


def validate_top_count(value: object) -> int:
    if isinstance(value, bool):
        raise InvalidTopCount()
    try:
        top_count = int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidTopCount() from exc
    if top_count < MIN_TOP_COUNT or top_count > MAX_TOP_COUNT:
        raise InvalidTopCount()
    return top_count


def get_leaderboard(*, quiz_id: int, top_count: object) -> list[QuizAttempt]:
    """Completed attempts for ``quiz_id``: best score first, faster attempts first on ties.

    Users with several completed attempts appear once per attempt.
    """
    limit = validate_top_count(top_count)
    return list(ranked_completed_attempts(quiz_id)[:limit])


def build_leaderboard_snapshot(*, quiz_id: int, top_count: object) -> dict[str, Any]:
    limit = validate_top_count(top_count)
    entries: list[dict[str, Any]] = []
    for index, attempt in enumerate(get_leaderboard(quiz_id=quiz_id, top_count=limit), start=1):
        entries.append({"rank": index, **attempt_summary_payload(attempt)})
    return {
        "quiz_id": quiz_id,
        "top_count": limit,
        "entries": entries,
    }
