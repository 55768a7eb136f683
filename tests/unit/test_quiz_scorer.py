"""
Unit tests for the quiz scorer
"""
import pytest

from interactive_lesson.quiz.scorer import CORRECT_MESSAGE, question_hash, score


class TestScore:
    """Test answer comparison"""

    @pytest.mark.parametrize(
        "submitted,expected",
        [
            ("4", "4"),
            ("4", "5"),
            ("  4 ", "4"),
            ("4", "\t4\n"),
            ("Paris", "paris"),
            ("", ""),
            ("", "4"),
            ("two words", "two  words"),
        ],
    )
    def test_is_correct_matches_trimmed_equality(self, submitted, expected):
        result = score(submitted, expected)
        assert result.is_correct == (submitted.strip() == expected.strip())

    def test_correct_message(self):
        assert score("4", "4").message == CORRECT_MESSAGE == "Correct!"

    def test_incorrect_message_names_expected_answer(self):
        assert score("5", "4").message == "Incorrect. The correct answer is 4."

    def test_case_sensitive(self):
        result = score("paris", "Paris")
        assert result.is_correct is False
        assert result.message == "Incorrect. The correct answer is Paris."

    def test_expected_answer_not_escaped(self):
        result = score("x", "<b>&</b>")
        assert result.message == "Incorrect. The correct answer is <b>&</b>."


class TestQuestionHash:
    """Test question hashing"""

    def test_hash_is_stable(self):
        assert question_hash("What is 2+2?") == question_hash("What is 2+2?")

    def test_hash_differs_for_different_questions(self):
        assert question_hash("What is 2+2?") != question_hash("What is 2+3?")

    def test_hash_is_hex_digest(self):
        digest = question_hash("What is 2+2?")
        assert len(digest) == 64
        int(digest, 16)

    def test_hash_handles_unicode(self):
        assert question_hash("Τι είναι 2+2;") == question_hash("Τι είναι 2+2;")
