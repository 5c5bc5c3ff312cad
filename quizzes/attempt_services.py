"""Quiz attempt lifecycle: start, submit, and read back attempts and results."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from django.conf import settings
from django.utils import timezone

from . import attempt_repository
from .content_services import QuizSnapshot, load_quiz_snapshot
from .exceptions import (
    AttemptAlreadyCompleted,
    AttemptNotFound,
    IncompleteSubmission,
    InvalidAnswerReference,
    QuizEmpty,
    QuizInactive,
    QuizNotFound,
)
from .models import QuizAttempt, UserAnswer
from .scoring_services import QuestionResult, score_answers, score_percentage
from .statistics_services import recompute_user_statistics

logger = logging.getLogger(__name__)

MAX_ANSWERS_PER_SUBMISSION = 500


class SubmissionPayloadError(ValueError):
    """Raised when a submission body does not match the expected shape."""


@dataclass(frozen=True)
class SubmittedAnswer:
    question_id: int
    choice_id: int


@dataclass(frozen=True)
class AttemptResult:
    attempt_id: int
    quiz_id: int
    quiz_title: str
    total_questions: int
    correct_answers: int
    score: int
    percentage: float
    started_at: datetime
    completed_at: datetime
    question_results: tuple[QuestionResult, ...]

    @property
    def incorrect_answers(self) -> int:
        return self.total_questions - self.correct_answers

    @property
    def duration(self) -> timedelta:
        return self.completed_at - self.started_at


def strict_answer_validation() -> bool:
    return bool(getattr(settings, "QUIZ_STRICT_ANSWER_VALIDATION", False))


def _positive_int(value: Any, *, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise SubmissionPayloadError(f"{label} must be an integer.")
    if value <= 0:
        raise SubmissionPayloadError(f"{label} must be positive.")
    return value


def normalize_start_payload(raw_payload: Any) -> int:
    if not isinstance(raw_payload, dict):
        raise SubmissionPayloadError("Request body must be a JSON object.")
    if "quiz_id" not in raw_payload:
        raise SubmissionPayloadError("quiz_id is required.")
    return _positive_int(raw_payload["quiz_id"], label="quiz_id")


def normalize_submission_payload(raw_payload: Any) -> tuple[int, list[SubmittedAnswer]]:
    if not isinstance(raw_payload, dict):
        raise SubmissionPayloadError("Request body must be a JSON object.")
    missing = [key for key in ("attempt_id", "answers") if key not in raw_payload]
    if missing:
        raise SubmissionPayloadError(f"Missing required keys: {', '.join(missing)}.")

    attempt_id = _positive_int(raw_payload["attempt_id"], label="attempt_id")
    raw_answers = raw_payload["answers"]
    if not isinstance(raw_answers, list) or not raw_answers:
        raise SubmissionPayloadError("answers must be a non-empty list.")
    if len(raw_answers) > MAX_ANSWERS_PER_SUBMISSION:
        raise SubmissionPayloadError("answers contains too many entries.")

    answers: list[SubmittedAnswer] = []
    for item in raw_answers:
        if not isinstance(item, dict):
            raise SubmissionPayloadError("Each answer must be an object.")
        answers.append(
            SubmittedAnswer(
                question_id=_positive_int(item.get("question_id"), label="question_id"),
                choice_id=_positive_int(item.get("choice_id"), label="choice_id"),
            )
        )
    return attempt_id, answers


def start_attempt(*, quiz_id: int, user_id: int) -> QuizAttempt:
    quiz = load_quiz_snapshot(quiz_id)
    if quiz is None:
        logger.warning("Cannot start attempt: quiz %s not found", quiz_id)
        raise QuizNotFound()
    if not quiz.is_active:
        logger.warning("Cannot start attempt: quiz %s is inactive", quiz_id)
        raise QuizInactive()
    if quiz.question_count == 0:
        logger.warning("Cannot start attempt: quiz %s has no questions", quiz_id)
        raise QuizEmpty()

    attempt = attempt_repository.create_attempt(quiz_id=quiz.id, user_id=user_id)
    logger.info("Quiz attempt started: %s for quiz %s by user %s", attempt.pk, quiz.id, user_id)
    return attempt


def _collect_answer_map(
    *,
    attempt_id: int,
    quiz: QuizSnapshot,
    answers: Sequence[SubmittedAnswer],
    strict: bool,
) -> dict[int, int]:
    answer_map: dict[int, int] = {}
    for answer in answers:
        question = quiz.question_by_id(answer.question_id)
        if question is None:
            if strict:
                raise InvalidAnswerReference()
            logger.warning(
                "Skipping answer for attempt %s: question %s is not part of quiz %s",
                attempt_id,
                answer.question_id,
                quiz.id,
            )
            continue
        if question.choice_by_id(answer.choice_id) is None or question.correct_choice is None:
            if strict:
                raise InvalidAnswerReference()
            logger.warning(
                "Skipping answer for attempt %s: invalid choice %s for question %s",
                attempt_id,
                answer.choice_id,
                answer.question_id,
            )
            continue
        if answer.question_id in answer_map:
            if strict:
                raise InvalidAnswerReference("Each question may only be answered once.")
            logger.warning(
                "Skipping duplicate answer for attempt %s: question %s already answered",
                attempt_id,
                answer.question_id,
            )
            continue
        answer_map[answer.question_id] = answer.choice_id
    return answer_map


def submit_attempt(
    *,
    attempt_id: int,
    user_id: int,
    answers: Sequence[SubmittedAnswer],
) -> AttemptResult:
    attempt = get_attempt(attempt_id=attempt_id, user_id=user_id)
    if attempt.is_completed:
        logger.warning("Quiz attempt already completed: %s", attempt_id)
        raise AttemptAlreadyCompleted()

    quiz = load_quiz_snapshot(attempt.quiz_id)
    if quiz is None:
        logger.error("Quiz %s for attempt %s is missing from the content store", attempt.quiz_id, attempt_id)
        raise AttemptNotFound()

    if len(answers) != quiz.question_count:
        logger.warning(
            "Answer count mismatch for attempt %s. Expected %s, got %s",
            attempt_id,
            quiz.question_count,
            len(answers),
        )
        raise IncompleteSubmission()

    answer_map = _collect_answer_map(
        attempt_id=attempt_id,
        quiz=quiz,
        answers=answers,
        strict=strict_answer_validation(),
    )
    outcome = score_answers(quiz, answer_map)
    completed_at = timezone.now()
    rows = [
        UserAnswer(
            attempt_id=attempt.pk,
            question_id=item.question_id,
            choice_id=item.selected_choice_id,
            correct_choice_id=item.correct_choice_id,
            is_correct=item.is_correct,
            answered_at=completed_at,
        )
        for item in outcome.answered_results
    ]
    completed = attempt_repository.mark_attempt_completed(
        attempt_id=attempt.pk,
        score=outcome.score,
        question_count=outcome.total_questions,
        completed_at=completed_at,
        answers=rows,
    )
    if not completed:
        logger.warning("Quiz attempt %s was completed by a concurrent submission", attempt_id)
        raise AttemptAlreadyCompleted()

    logger.info(
        "Quiz attempt completed: %s with score %s%% (%s/%s correct)",
        attempt.pk,
        outcome.score,
        outcome.correct_answers,
        outcome.total_questions,
    )

    try:
        recompute_user_statistics(user_id)
    except Exception:
        logger.warning("Statistics update failed for user %s after attempt %s", user_id, attempt.pk, exc_info=True)

    return AttemptResult(
        attempt_id=attempt.pk,
        quiz_id=quiz.id,
        quiz_title=quiz.title,
        total_questions=outcome.total_questions,
        correct_answers=outcome.correct_answers,
        score=outcome.score,
        percentage=outcome.percentage,
        started_at=attempt.started_at,
        completed_at=completed_at,
        question_results=outcome.answered_results,
    )


def get_attempt(*, attempt_id: int, user_id: int) -> QuizAttempt:
    try:
        return attempt_repository.get_owned_attempt(attempt_id=attempt_id, user_id=user_id)
    except AttemptNotFound:
        logger.warning("Quiz attempt not found or user mismatch: %s", attempt_id)
        raise


def get_result(*, attempt_id: int, user_id: int) -> AttemptResult:
    attempt = get_attempt(attempt_id=attempt_id, user_id=user_id)
    if not attempt.is_completed:
        logger.warning("Result requested for incomplete attempt %s", attempt_id)
        raise AttemptNotFound()

    question_results: list[QuestionResult] = []
    correct_count = 0
    for row in attempt_repository.answers_for_attempt(attempt.pk):
        if row.is_correct:
            correct_count += 1
        correct_choice = row.correct_choice
        question_results.append(
            QuestionResult(
                question_id=row.question_id,
                question_text=row.question.text,
                explanation=row.question.explanation,
                selected_choice_id=row.choice_id,
                selected_choice_text=row.choice.text,
                correct_choice_id=correct_choice.pk if correct_choice is not None else None,
                correct_choice_text=correct_choice.text if correct_choice is not None else "",
                is_correct=row.is_correct,
            )
        )

    return AttemptResult(
        attempt_id=attempt.pk,
        quiz_id=attempt.quiz_id,
        quiz_title=attempt.quiz.title,
        total_questions=attempt.question_count,
        correct_answers=correct_count,
        score=attempt.score,
        percentage=score_percentage(correct_count, attempt.question_count),
        started_at=attempt.started_at,
        completed_at=attempt.completed_at,
        question_results=tuple(question_results),
    )


def list_user_attempts(user_id: int) -> list[QuizAttempt]:
    return list(attempt_repository.list_attempts_for_user(user_id))


def list_quiz_attempts(quiz_id: int) -> list[QuizAttempt]:
    return list(attempt_repository.ranked_completed_attempts(quiz_id))


def attempt_summary_payload(attempt: QuizAttempt) -> dict[str, Any]:
    return {
        "id": attempt.pk,
        "quiz_id": attempt.quiz_id,
        "quiz_title": attempt.quiz.title,
        "user_id": attempt.user_id,
        "username": attempt.user.get_username(),
        "started_at": attempt.started_at.isoformat(),
        "completed_at": attempt.completed_at.isoformat() if attempt.completed_at else None,
        "score": attempt.score,
        "is_completed": attempt.is_completed,
        "duration_seconds": attempt.duration_seconds,
    }


def result_payload(result: AttemptResult) -> dict[str, Any]:
    return {
        "attempt_id": result.attempt_id,
        "quiz_id": result.quiz_id,
        "quiz_title": result.quiz_title,
        "total_questions": result.total_questions,
        "correct_answers": result.correct_answers,
        "incorrect_answers": result.incorrect_answers,
        "score": result.score,
        "percentage": result.percentage,
        "started_at": result.started_at.isoformat(),
        "completed_at": result.completed_at.isoformat(),
        "duration_seconds": result.duration.total_seconds(),
        "question_results": [
            {
                "question_id": item.question_id,
                "question_text": item.question_text,
                "explanation": item.explanation,
                "selected_choice_id": item.selected_choice_id,
                "selected_choice_text": item.selected_choice_text,
                "correct_choice_id": item.correct_choice_id,
                "correct_choice_text": item.correct_choice_text,
                "is_correct": item.is_correct,
            }
            for item in result.question_results
        ],
    }
