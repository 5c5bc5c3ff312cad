"""Pure scoring of a submitted answer set against a quiz snapshot."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from .content_services import QuizSnapshot


@dataclass(frozen=True)
class QuestionResult:
    question_id: int
    question_text: str
    explanation: str
    selected_choice_id: int | None
    selected_choice_text: str
    correct_choice_id: int | None
    correct_choice_text: str
    is_correct: bool

    @property
    def answered(self) -> bool:
        return self.selected_choice_id is not None


@dataclass(frozen=True)
class ScoreResult:
    total_questions: int
    correct_answers: int
    score: int
    percentage: float
    question_results: tuple[QuestionResult, ...]

    @property
    def incorrect_answers(self) -> int:
        return self.total_questions - self.correct_answers

    @property
    def answered_results(self) -> tuple[QuestionResult, ...]:
        return tuple(item for item in self.question_results if item.answered)


def round_half_up(value: float) -> int:
    return int(Decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def score_percentage(correct: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return 100 * correct / total


def compute_score(correct: int, total: int) -> int:
    return round_half_up(score_percentage(correct, total))


def score_answers(quiz: QuizSnapshot, answers: Mapping[int, int]) -> ScoreResult:
    """Score ``answers`` (question id -> choice id) against every question of ``quiz``.

    Questions missing from ``answers`` count as unanswered and incorrect, as do
    choices that do not belong to the question they were submitted for.
    """
    results: list[QuestionResult] = []
    correct_count = 0
    for question in quiz.questions:
        correct_choice = question.correct_choice
        selected_id = answers.get(question.id)
        selected = question.choice_by_id(selected_id) if selected_id is not None else None
        is_correct = bool(selected is not None and selected.is_correct)
        if is_correct:
            correct_count += 1
        results.append(
            QuestionResult(
                question_id=question.id,
                question_text=question.text,
                explanation=question.explanation,
                selected_choice_id=selected.id if selected is not None else None,
                selected_choice_text=selected.text if selected is not None else "",
                correct_choice_id=correct_choice.id if correct_choice is not None else None,
                correct_choice_text=correct_choice.text if correct_choice is not None else "",
                is_correct=is_correct,
            )
        )

    total = quiz.question_count
    return ScoreResult(
        total_questions=total,
        correct_answers=correct_count,
        score=compute_score(correct_count, total),
        percentage=score_percentage(correct_count, total),
        question_results=tuple(results),
    )
