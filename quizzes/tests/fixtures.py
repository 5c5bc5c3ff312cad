from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from django.contrib.auth.models import User
from django.utils import timezone

from quizzes.models import Choice, Question, Quiz, QuizAttempt


@dataclass
class QuestionFixture:
    question: Question
    correct: Choice
    wrong: Choice


class QuizFixturesMixin:
    password = "Secret123!!"

    def _create_user(self, username: str = "alice") -> User:
        return User.objects.create_user(username=username, password=self.password)

    def _create_quiz(
        self,
        *,
        owner: User,
        question_count: int = 2,
        title: str = "Personality basics",
        is_active: bool = True,
    ) -> tuple[Quiz, list[QuestionFixture]]:
        quiz = Quiz.objects.create(title=title, is_active=is_active, created_by=owner)
        fixtures: list[QuestionFixture] = []
        for index in range(question_count):
            question = Question.objects.create(
                quiz=quiz,
                text=f"Q{index + 1}",
                explanation=f"Explanation {index + 1}",
                position=index,
            )
            correct = Choice.objects.create(question=question, text="Right", is_correct=True)
            wrong = Choice.objects.create(question=question, text="Wrong", is_correct=False)
            fixtures.append(QuestionFixture(question=question, correct=correct, wrong=wrong))
        return quiz, fixtures

    def _completed_attempt(
        self,
        *,
        quiz: Quiz,
        user: User,
        score: int,
        duration: timedelta,
        started_at: datetime | None = None,
    ) -> QuizAttempt:
        started = started_at or timezone.now() - timedelta(hours=1)
        return QuizAttempt.objects.create(
            quiz=quiz,
            user=user,
            score=score,
            question_count=2,
            started_at=started,
            completed_at=started + duration,
        )
