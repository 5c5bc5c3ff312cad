"""JSON APIs for quiz attempts, results, leaderboards and user statistics."""

from __future__ import annotations

import json
import logging
from functools import wraps
from typing import Any

from django.contrib.auth.decorators import login_required
from django.db import DatabaseError
from django.http import HttpRequest, HttpResponse, HttpResponseBadRequest, JsonResponse
from django.views.decorators.http import require_GET, require_POST

from .attempt_services import (
    SubmissionPayloadError,
    attempt_summary_payload,
    get_attempt,
    get_result,
    list_quiz_attempts,
    list_user_attempts,
    normalize_start_payload,
    normalize_submission_payload,
    result_payload,
    start_attempt,
    submit_attempt,
)
from .exceptions import AttemptError
from .leaderboard_services import build_leaderboard_snapshot, default_top_count
from .statistics_services import get_statistics_payload

logger = logging.getLogger(__name__)
MAX_BODY_BYTES = 1_000_000
ERROR_STATUS_BY_KIND = {
    "not_found": 404,
    "conflict": 409,
    "validation": 400,
}


def _error_response(exc: AttemptError) -> JsonResponse:
    return JsonResponse(
        {"error": exc.code, "message": exc.message},
        status=ERROR_STATUS_BY_KIND.get(exc.kind, 400),
    )


def _json_api(view):
    """Translate service failures into stable JSON error bodies."""

    @wraps(view)
    def wrapper(request: HttpRequest, *args, **kwargs) -> HttpResponse:
        try:
            return view(request, *args, **kwargs)
        except AttemptError as exc:
            return _error_response(exc)
        except DatabaseError:
            logger.exception("Storage failure in %s for user %s", view.__name__, request.user.pk)
            return JsonResponse(
                {"error": "service_unavailable", "message": "The service is temporarily unavailable."},
                status=503,
            )

    return wrapper


def _read_json_body(request: HttpRequest) -> Any:
    if len(request.body) > MAX_BODY_BYTES:
        raise SubmissionPayloadError("Request body is too large.")
    try:
        return json.loads(request.body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise SubmissionPayloadError("Invalid JSON body.") from exc


@login_required
@require_POST
@_json_api
def attempt_start_view(request: HttpRequest) -> HttpResponse:
    try:
        quiz_id = normalize_start_payload(_read_json_body(request))
    except SubmissionPayloadError as exc:
        return HttpResponseBadRequest(str(exc))

    attempt = start_attempt(quiz_id=quiz_id, user_id=request.user.pk)
    return JsonResponse(attempt_summary_payload(attempt), status=201)


@login_required
@require_POST
@_json_api
def attempt_submit_view(request: HttpRequest) -> HttpResponse:
    try:
        attempt_id, answers = normalize_submission_payload(_read_json_body(request))
    except SubmissionPayloadError as exc:
        return HttpResponseBadRequest(str(exc))

    result = submit_attempt(attempt_id=attempt_id, user_id=request.user.pk, answers=answers)
    return JsonResponse(result_payload(result))


@login_required
@require_GET
@_json_api
def attempt_detail_view(request: HttpRequest, attempt_id: str) -> HttpResponse:
    attempt = get_attempt(attempt_id=int(attempt_id), user_id=request.user.pk)
    return JsonResponse(attempt_summary_payload(attempt))


@login_required
@require_GET
@_json_api
def attempt_result_view(request: HttpRequest, attempt_id: str) -> HttpResponse:
    result = get_result(attempt_id=int(attempt_id), user_id=request.user.pk)
    return JsonResponse(result_payload(result))


@login_required
@require_GET
@_json_api
def my_attempts_view(request: HttpRequest) -> HttpResponse:
    attempts = list_user_attempts(request.user.pk)
    return JsonResponse({"attempts": [attempt_summary_payload(item) for item in attempts]})


@login_required
@require_GET
@_json_api
def quiz_attempts_view(request: HttpRequest, quiz_id: str) -> HttpResponse:
    attempts = list_quiz_attempts(int(quiz_id))
    return JsonResponse(
        {
            "quiz_id": int(quiz_id),
            "attempts": [attempt_summary_payload(item) for item in attempts],
        }
    )


@login_required
@require_GET
@_json_api
def quiz_leaderboard_view(request: HttpRequest, quiz_id: str) -> HttpResponse:
    top_count = request.GET.get("top", "").strip() or default_top_count()
    return JsonResponse(build_leaderboard_snapshot(quiz_id=int(quiz_id), top_count=top_count))


@login_required
@require_GET
@_json_api
def my_statistics_view(request: HttpRequest) -> HttpResponse:
    return JsonResponse(get_statistics_payload(request.user.pk))
