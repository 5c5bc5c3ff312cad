import unittest

from quizzes.content_services import ChoiceSnapshot, QuestionSnapshot, QuizSnapshot
from quizzes.scoring_services import compute_score, round_half_up, score_answers


def _quiz(question_count: int) -> QuizSnapshot:
    questions = []
    for index in range(question_count):
        base = (index + 1) * 10
        questions.append(
            QuestionSnapshot(
                id=index + 1,
                text=f"Q{index + 1}",
                explanation="",
                image_url="",
                choices=(
                    ChoiceSnapshot(id=base + 1, text="Right", is_correct=True),
                    ChoiceSnapshot(id=base + 2, text="Wrong", is_correct=False),
                ),
            )
        )
    return QuizSnapshot(id=1, title="Quiz", is_active=True, created_by_id=1, questions=tuple(questions))


class ScoreAnswersTests(unittest.TestCase):
    def test_all_correct_scores_100(self) -> None:
        result = score_answers(_quiz(2), {1: 11, 2: 21})

        self.assertEqual(result.score, 100)
        self.assertEqual(result.correct_answers, 2)
        self.assertEqual(result.incorrect_answers, 0)
        self.assertEqual(result.percentage, 100.0)

    def test_one_of_two_correct_scores_50(self) -> None:
        result = score_answers(_quiz(2), {1: 11, 2: 22})

        self.assertEqual(result.score, 50)
        self.assertEqual(result.correct_answers, 1)
        self.assertEqual([item.is_correct for item in result.question_results], [True, False])
        self.assertEqual(result.question_results[1].correct_choice_id, 21)
        self.assertEqual(result.question_results[1].selected_choice_text, "Wrong")

    def test_unanswered_question_is_incorrect_and_not_answered(self) -> None:
        result = score_answers(_quiz(2), {1: 11})

        self.assertEqual(result.score, 50)
        self.assertEqual(len(result.question_results), 2)
        self.assertEqual(len(result.answered_results), 1)
        self.assertIsNone(result.question_results[1].selected_choice_id)
        self.assertFalse(result.question_results[1].is_correct)

    def test_choice_from_other_question_is_incorrect(self) -> None:
        result = score_answers(_quiz(2), {1: 21, 2: 21})

        self.assertFalse(result.question_results[0].is_correct)
        self.assertFalse(result.question_results[0].answered)
        self.assertTrue(result.question_results[1].is_correct)
        self.assertEqual(result.score, 50)

    def test_single_question_quiz_scores_only_zero_or_hundred(self) -> None:
        quiz = _quiz(1)
        scores = {
            score_answers(quiz, {}).score,
            score_answers(quiz, {1: 11}).score,
            score_answers(quiz, {1: 12}).score,
        }
        self.assertEqual(scores, {0, 100})

    def test_percentage_keeps_unrounded_ratio(self) -> None:
        result = score_answers(_quiz(3), {1: 11, 2: 22, 3: 32})

        self.assertEqual(result.score, 33)
        self.assertAlmostEqual(result.percentage, 100 / 3)

    def test_empty_quiz_scores_zero(self) -> None:
        result = score_answers(_quiz(0), {})

        self.assertEqual(result.score, 0)
        self.assertEqual(result.total_questions, 0)
        self.assertEqual(result.question_results, ())


class RoundingTests(unittest.TestCase):
    def test_half_rounds_up(self) -> None:
        self.assertEqual(round_half_up(12.5), 13)
        self.assertEqual(round_half_up(62.5), 63)
        self.assertEqual(round_half_up(0.5), 1)

    def test_compute_score_matches_formula(self) -> None:
        self.assertEqual(compute_score(1, 8), 13)
        self.assertEqual(compute_score(2, 3), 67)
        self.assertEqual(compute_score(1, 3), 33)
        self.assertEqual(compute_score(0, 5), 0)
        self.assertEqual(compute_score(5, 5), 100)
