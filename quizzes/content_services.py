"""Read-only access to quiz content as immutable, id-indexed snapshots."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .models import Quiz

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChoiceSnapshot:
    id: int
    text: str
    is_correct: bool


@dataclass(frozen=True)
class QuestionSnapshot:
    id: int
    text: str
    explanation: str
    image_url: str
    choices: tuple[ChoiceSnapshot, ...]

    def choice_by_id(self, choice_id: int) -> ChoiceSnapshot | None:
        for choice in self.choices:
            if choice.id == choice_id:
                return choice
        return None

    @property
    def correct_choice(self) -> ChoiceSnapshot | None:
        for choice in self.choices:
            if choice.is_correct:
                return choice
        return None


@dataclass(frozen=True)
class QuizSnapshot:
    id: int
    title: str
    is_active: bool
    created_by_id: int
    questions: tuple[QuestionSnapshot, ...]
    _questions_by_id: dict[int, QuestionSnapshot] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_questions_by_id", {question.id: question for question in self.questions})

    @property
    def question_count(self) -> int:
        return len(self.questions)

    def question_by_id(self, question_id: int) -> QuestionSnapshot | None:
        return self._questions_by_id.get(question_id)


def load_quiz_snapshot(quiz_id: int) -> QuizSnapshot | None:
    quiz = (
        Quiz.objects.filter(pk=quiz_id)
        .prefetch_related("questions__choices")
        .first()
    )
    if quiz is None:
        logger.debug("Quiz %s not found in content store", quiz_id)
        return None
    return snapshot_from_quiz(quiz)


def snapshot_from_quiz(quiz: Quiz) -> QuizSnapshot:
    questions = tuple(
        QuestionSnapshot(
            id=question.pk,
            text=question.text,
            explanation=question.explanation,
            image_url=question.image_url,
            choices=tuple(
                ChoiceSnapshot(id=choice.pk, text=choice.text, is_correct=choice.is_correct)
                for choice in question.choices.all()
            ),
        )
        for question in quiz.questions.all()
    )
    return QuizSnapshot(
        id=quiz.pk,
        title=quiz.title,
        is_active=quiz.is_active,
        created_by_id=quiz.created_by_id,
        questions=questions,
    )
