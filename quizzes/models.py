"""Data model for quiz content, attempts, answers and per-user statistics."""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone


class Quiz(models.Model):
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="created_quizzes",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = "quizzes"
        indexes = [
            models.Index(fields=["is_active"], name="quiz_active_idx"),
        ]

    def __str__(self) -> str:
        state = "active" if self.is_active else "inactive"
        return f"{self.pk}:{self.title}:{state}"


class Question(models.Model):
    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name="questions")
    text = models.CharField(max_length=500)
    explanation = models.CharField(max_length=1000, blank=True)
    image_url = models.URLField(max_length=500, blank=True)
    position = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["position", "id"]
        indexes = [
            models.Index(fields=["quiz", "position"], name="question_quiz_pos_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.quiz_id}:{self.pk}:{self.text[:40]}"


class Choice(models.Model):
    question = models.ForeignKey(Question, on_delete=models.CASCADE, related_name="choices")
    text = models.CharField(max_length=500)
    is_correct = models.BooleanField(default=False)

    class Meta:
        ordering = ["id"]

    def __str__(self) -> str:
        marker = "correct" if self.is_correct else "wrong"
        return f"{self.question_id}:{self.pk}:{marker}"


class QuizAttempt(models.Model):
    class Status(models.TextChoices):
        IN_PROGRESS = "in_progress", "In progress"
        COMPLETED = "completed", "Completed"

    quiz = models.ForeignKey(Quiz, on_delete=models.PROTECT, related_name="attempts")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="quiz_attempts")
    score = models.PositiveSmallIntegerField(default=0)
    question_count = models.PositiveIntegerField(default=0)
    started_at = models.DateTimeField(default=timezone.now)
    completed_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        indexes = [
            models.Index(fields=["user", "started_at"], name="attempt_user_started_idx"),
            models.Index(fields=["quiz", "completed_at"], name="attempt_quiz_completed_idx"),
        ]

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    @property
    def status(self) -> str:
        return self.Status.COMPLETED if self.is_completed else self.Status.IN_PROGRESS

    @property
    def duration_seconds(self) -> float | None:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    def __str__(self) -> str:
        return f"{self.user_id}:{self.quiz_id}:{self.status}:{self.score}"


class UserAnswer(models.Model):
    attempt = models.ForeignKey(QuizAttempt, on_delete=models.CASCADE, related_name="answers")
    question = models.ForeignKey(Question, on_delete=models.PROTECT, related_name="user_answers")
    choice = models.ForeignKey(Choice, on_delete=models.PROTECT, related_name="user_answers")
    correct_choice = models.ForeignKey(
        Choice,
        on_delete=models.PROTECT,
        related_name="+",
        blank=True,
        null=True,
    )
    is_correct = models.BooleanField(default=False)
    answered_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["attempt", "question"], name="uq_attempt_question_answer"),
        ]

    def __str__(self) -> str:
        return f"{self.attempt_id}:{self.question_id}:{self.choice_id}:{self.is_correct}"


class UserStatistics(models.Model):
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="quiz_statistics")
    total_attempts = models.PositiveIntegerField(default=0)
    average_score = models.FloatField(default=0.0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "user statistics"

    def __str__(self) -> str:
        return f"{self.user_id}:attempts={self.total_attempts}:avg={self.average_score:.1f}"
