from __future__ import annotations

from datetime import timedelta

from django.test import TestCase, override_settings

from quizzes.exceptions import InvalidTopCount
from quizzes.leaderboard_services import (
    build_leaderboard_snapshot,
    default_top_count,
    get_leaderboard,
    validate_top_count,
)
from quizzes.models import QuizAttempt

from .fixtures import QuizFixturesMixin


class LeaderboardTests(QuizFixturesMixin, TestCase):
    def setUp(self) -> None:
        self.owner = self._create_user("author")
        self.alice = self._create_user("alice")
        self.bob = self._create_user("bob")
        self.quiz, _ = self._create_quiz(owner=self.owner)

    def test_top_count_outside_range_is_rejected(self) -> None:
        for value in (0, 200, -1, 101, "abc", None, True):
            with self.subTest(value=value):
                with self.assertRaises(InvalidTopCount):
                    get_leaderboard(quiz_id=self.quiz.pk, top_count=value)

    def test_top_count_bounds_are_accepted(self) -> None:
        self.assertEqual(validate_top_count(1), 1)
        self.assertEqual(validate_top_count(100), 100)
        self.assertEqual(validate_top_count("25"), 25)

    def test_equal_scores_rank_faster_attempt_first(self) -> None:
        slow = self._completed_attempt(quiz=self.quiz, user=self.alice, score=80, duration=timedelta(minutes=5))
        fast = self._completed_attempt(quiz=self.quiz, user=self.bob, score=80, duration=timedelta(minutes=3))

        ranking = get_leaderboard(quiz_id=self.quiz.pk, top_count=10)

        self.assertEqual([item.pk for item in ranking], [fast.pk, slow.pk])

    def test_ordering_holds_for_every_adjacent_pair(self) -> None:
        rows = [
            (self.alice, 70, 4),
            (self.bob, 90, 10),
            (self.alice, 90, 2),
            (self.bob, 70, 1),
            (self.alice, 100, 30),
            (self.bob, 90, 2),
        ]
        for user, score, minutes in rows:
            self._completed_attempt(quiz=self.quiz, user=user, score=score, duration=timedelta(minutes=minutes))

        ranking = get_leaderboard(quiz_id=self.quiz.pk, top_count=100)

        self.assertEqual(len(ranking), len(rows))
        for first, second in zip(ranking, ranking[1:]):
            self.assertTrue(
                first.score > second.score
                or (first.score == second.score and first.duration_seconds <= second.duration_seconds)
            )

    def test_in_progress_and_other_quiz_attempts_are_excluded(self) -> None:
        other_quiz, _ = self._create_quiz(owner=self.owner, title="Other")
        kept = self._completed_attempt(quiz=self.quiz, user=self.alice, score=50, duration=timedelta(minutes=1))
        self._completed_attempt(quiz=other_quiz, user=self.alice, score=100, duration=timedelta(minutes=1))
        QuizAttempt.objects.create(quiz=self.quiz, user=self.bob)

        ranking = get_leaderboard(quiz_id=self.quiz.pk, top_count=10)

        self.assertEqual([item.pk for item in ranking], [kept.pk])

    def test_users_are_not_deduplicated_and_result_is_truncated(self) -> None:
        for score in (60, 70, 80):
            self._completed_attempt(quiz=self.quiz, user=self.alice, score=score, duration=timedelta(minutes=1))

        ranking = get_leaderboard(quiz_id=self.quiz.pk, top_count=2)

        self.assertEqual([item.score for item in ranking], [80, 70])
        self.assertEqual({item.user_id for item in ranking}, {self.alice.pk})

    def test_empty_leaderboard_is_valid(self) -> None:
        self.assertEqual(get_leaderboard(quiz_id=self.quiz.pk, top_count=10), [])
        snapshot = build_leaderboard_snapshot(quiz_id=self.quiz.pk, top_count=10)
        self.assertEqual(snapshot["entries"], [])

    def test_snapshot_entries_carry_rank_and_summary(self) -> None:
        self._completed_attempt(quiz=self.quiz, user=self.alice, score=80, duration=timedelta(minutes=5))
        self._completed_attempt(quiz=self.quiz, user=self.bob, score=80, duration=timedelta(minutes=3))

        snapshot = build_leaderboard_snapshot(quiz_id=self.quiz.pk, top_count="5")

        self.assertEqual(snapshot["top_count"], 5)
        self.assertEqual([entry["rank"] for entry in snapshot["entries"]], [1, 2])
        self.assertEqual(snapshot["entries"][0]["username"], "bob")
        self.assertEqual(snapshot["entries"][0]["duration_seconds"], 180.0)
        self.assertTrue(snapshot["entries"][0]["is_completed"])

    @override_settings(QUIZ_LEADERBOARD_DEFAULT_TOP=500)
    def test_default_top_count_is_clamped(self) -> None:
        self.assertEqual(default_top_count(), 100)
