from __future__ import annotations

import io
from datetime import timedelta

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from quizzes.models import QuizAttempt, UserStatistics
from quizzes.statistics_services import get_statistics_payload, recompute_user_statistics

from .fixtures import QuizFixturesMixin


class StatisticsTests(QuizFixturesMixin, TestCase):
    def setUp(self) -> None:
        self.owner = self._create_user("author")
        self.alice = self._create_user("alice")
        self.quiz, _ = self._create_quiz(owner=self.owner)

    def test_user_without_completed_attempts_gets_zeroes(self) -> None:
        QuizAttempt.objects.create(quiz=self.quiz, user=self.alice, score=0)

        statistics = recompute_user_statistics(self.alice.pk)

        self.assertEqual(statistics.total_attempts, 0)
        self.assertEqual(statistics.average_score, 0.0)

    def test_average_uses_completed_attempts_only(self) -> None:
        self._completed_attempt(quiz=self.quiz, user=self.alice, score=100, duration=timedelta(minutes=1))
        self._completed_attempt(quiz=self.quiz, user=self.alice, score=50, duration=timedelta(minutes=1))
        self._completed_attempt(quiz=self.quiz, user=self.alice, score=0, duration=timedelta(minutes=1))
        QuizAttempt.objects.create(quiz=self.quiz, user=self.alice, score=0)

        statistics = recompute_user_statistics(self.alice.pk)

        self.assertEqual(statistics.total_attempts, 3)
        self.assertEqual(statistics.average_score, 50.0)

    def test_recompute_overwrites_drifted_values(self) -> None:
        UserStatistics.objects.create(user=self.alice, total_attempts=42, average_score=99.0)
        self._completed_attempt(quiz=self.quiz, user=self.alice, score=80, duration=timedelta(minutes=1))

        recompute_user_statistics(self.alice.pk)

        statistics = UserStatistics.objects.get(user=self.alice)
        self.assertEqual(statistics.total_attempts, 1)
        self.assertEqual(statistics.average_score, 80.0)

    def test_payload_defaults_when_never_computed(self) -> None:
        payload = get_statistics_payload(self.alice.pk)

        self.assertEqual(payload["total_attempts"], 0)
        self.assertEqual(payload["average_score"], 0.0)
        self.assertIsNone(payload["updated_at"])

    def test_command_rebuilds_named_user(self) -> None:
        self._completed_attempt(quiz=self.quiz, user=self.alice, score=60, duration=timedelta(minutes=1))
        out = io.StringIO()

        call_command("statistics_recompute", "--user", "alice", stdout=out)

        self.assertIn("1 user(s)", out.getvalue())
        self.assertEqual(UserStatistics.objects.get(user=self.alice).average_score, 60.0)
        self.assertFalse(UserStatistics.objects.filter(user=self.owner).exists())

    def test_command_rebuilds_all_users(self) -> None:
        out = io.StringIO()

        call_command("statistics_recompute", "--all", stdout=out)

        self.assertIn("2 user(s)", out.getvalue())
        self.assertEqual(UserStatistics.objects.count(), 2)

    def test_command_requires_target(self) -> None:
        with self.assertRaises(CommandError):
            call_command("statistics_recompute")

    def test_command_rejects_unknown_user(self) -> None:
        with self.assertRaises(CommandError):
            call_command("statistics_recompute", "--user", "nobody")
