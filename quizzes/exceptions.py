"""Typed failures raised by the attempt, scoring and leaderboard services."""

from __future__ import annotations


class AttemptError(Exception):
    """Base class for failures that are reported to the caller as-is.

    ``code`` is a stable machine-readable identifier, ``message`` a stable
    human-readable text and ``kind`` one of ``not_found``, ``conflict`` or
    ``validation``. Messages never include internal details.
    """

    code = "attempt_error"
    kind = "validation"
    default_message = "The request could not be processed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class QuizNotFound(AttemptError):
    code = "quiz_not_found"
    kind = "not_found"
    default_message = "Quiz not found."


class QuizInactive(AttemptError):
    code = "quiz_inactive"
    kind = "validation"
    default_message = "Quiz is not active."


class QuizEmpty(AttemptError):
    code = "quiz_empty"
    kind = "validation"
    default_message = "Quiz has no questions."


class AttemptNotFound(AttemptError):
    code = "attempt_not_found"
    kind = "not_found"
    default_message = "Attempt not found or you don't have permission to view it."


class AttemptNotOwned(AttemptNotFound):
    """Ownership mismatch; reported exactly like a missing attempt."""


class AttemptAlreadyCompleted(AttemptError):
    code = "attempt_already_completed"
    kind = "conflict"
    default_message = "This attempt has already been submitted."


class IncompleteSubmission(AttemptError):
    code = "incomplete_submission"
    kind = "validation"
    default_message = "Every question must be answered before submitting."


class InvalidAnswerReference(AttemptError):
    code = "invalid_answer_reference"
    kind = "validation"
    default_message = "An answer references a question or choice that is not part of this quiz."


class InvalidTopCount(AttemptError):
    code = "invalid_top_count"
    kind = "validation"
    default_message = "Leaderboard size must be between 1 and 100."
