"""
Unit tests for quiz submission and results handling
"""
import pytest

from interactive_lesson.quiz.scorer import question_hash
from interactive_lesson.quiz.service import QuizService
from interactive_lesson.quiz.store import AnswerStore
from interactive_lesson.services.storage_service import InMemoryKeyValueStore
from interactive_lesson.utils.errors import AuthError, ValidationError


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def service(store):
    return QuizService(AnswerStore(store))


class TestSubmit:
    """Test submission handling"""

    def test_correct_submission(self, service):
        outcome = service.submit("1", "What is 2+2?", "4", "4")
        assert outcome.success is True
        assert outcome.answer == "4"
        assert outcome.message == "Correct!"

        results = service.get_results("1")
        assert results.total_score == 1
        assert len(results.results) == 1
        record = results.results[0]
        assert record.question_hash == question_hash("What is 2+2?")
        assert record.is_correct is True
        assert record.submitted_at is not None

    def test_incorrect_submission_leaves_score(self, service):
        outcome = service.submit("1", "What is 2+2?", "5", "4")
        assert outcome.message == "Incorrect. The correct answer is 4."

        results = service.get_results("1")
        assert results.total_score == 0
        assert results.results[0].is_correct is False
        assert results.results[0].answer == "5"

    @pytest.mark.parametrize(
        "question,answer,correct",
        [
            ("What is 2+2?", "", "4"),
            ("", "4", "4"),
            ("What is 2+2?", "4", ""),
            ("What is 2+2?", "   ", "4"),
            ("What is 2+2?", "<b></b>", "4"),
            ("What is 2+2?", None, "4"),
        ],
    )
    def test_missing_fields_raise_validation_error(self, service, question, answer, correct):
        with pytest.raises(ValidationError) as exc_info:
            service.submit("1", question, answer, correct)
        assert exc_info.value.status_code == 400
        assert exc_info.value.code == "missing_params"

    def test_validation_error_stores_nothing(self, service, store):
        with pytest.raises(ValidationError):
            service.submit("1", "What is 2+2?", "", "4")
        assert store.items("user:1") == []

    @pytest.mark.parametrize("user_id", [None, "", "   "])
    def test_missing_user_raises_auth_error(self, service, user_id):
        with pytest.raises(AuthError):
            service.submit(user_id, "What is 2+2?", "4", "4")

    def test_answer_is_sanitized(self, service):
        outcome = service.submit("1", "What is 2+2?", "  <em>4</em> ", "4")
        assert outcome.answer == "4"
        assert outcome.message == "Correct!"

    def test_resubmission_overwrites_record(self, service):
        service.submit("1", "What is 2+2?", "5", "4")
        service.submit("1", "What is 2+2?", "4", "4")

        results = service.get_results("1")
        assert len(results.results) == 1
        assert results.results[0].answer == "4"
        assert results.results[0].is_correct is True

    def test_repeated_correct_answers_each_count(self, service):
        service.submit("1", "What is 2+2?", "4", "4")
        service.submit("1", "What is 2+2?", "4", "4")
        assert service.get_results("1").total_score == 2

    def test_wrong_answer_after_correct_keeps_score(self, service):
        service.submit("1", "What is 2+2?", "4", "4")
        service.submit("1", "What is 2+2?", "5", "4")
        results = service.get_results("1")
        assert results.total_score == 1
        assert results.results[0].is_correct is False


class TestGetResults:
    """Test results retrieval"""

    def test_fresh_user_has_no_results(self, service):
        results = service.get_results("99")
        assert results.success is True
        assert results.results == []
        assert results.total_score == 0

    def test_results_are_per_user(self, service):
        service.submit("1", "What is 2+2?", "4", "4")
        service.submit("2", "What is 3+3?", "7", "6")

        first = service.get_results("1")
        second = service.get_results("2")
        assert [r.answer for r in first.results] == ["4"]
        assert first.total_score == 1
        assert [r.answer for r in second.results] == ["7"]
        assert second.total_score == 0

    def test_results_in_submission_order(self, service):
        service.submit("1", "Q1", "a", "a")
        service.submit("1", "Q2", "b", "c")
        service.submit("1", "Q3", "d", "d")
        results = service.get_results("1")
        assert [r.question_hash for r in results.results] == [
            question_hash("Q1"),
            question_hash("Q2"),
            question_hash("Q3"),
        ]
        assert results.total_score == 2

    def test_missing_user_raises_auth_error(self, service):
        with pytest.raises(AuthError):
            service.get_results(None)

    def test_non_numeric_score_reads_as_zero(self, service, store):
        store.set("user:1", "quiz_score", "lots")
        assert service.get_results("1").total_score == 0


class _InterleavingStore(InMemoryKeyValueStore):
    """Runs ``on_first_answer_write`` right after the first answer record is stored."""

    def __init__(self):
        super().__init__()
        self.on_first_answer_write = None

    def set(self, scope, key, value):
        super().set(scope, key, value)
        if key.startswith("quiz_answer_") and self.on_first_answer_write:
            callback, self.on_first_answer_write = self.on_first_answer_write, None
            callback()


class TestOverlappingSubmissions:
    """Test two submissions for the same question racing each other"""

    def test_record_never_mixes_submissions(self):
        store = _InterleavingStore()
        service = QuizService(AnswerStore(store))
        store.on_first_answer_write = lambda: service.submit("1", "What is 2+2?", "5", "4")

        service.submit("1", "What is 2+2?", "4", "4")

        results = service.get_results("1")
        assert len(results.results) == 1
        record = results.results[0]
        assert (record.answer, record.is_correct) in {("4", True), ("5", False)}
        assert results.total_score == 1

    def test_record_is_a_single_key(self, store, service):
        service.submit("1", "What is 2+2?", "4", "4")
        keys = [key for key, _ in store.items("user:1", "quiz_")]
        assert keys == [f"quiz_answer_{question_hash('What is 2+2?')}", "quiz_score"]

    def test_unreadable_record_is_skipped(self, store, service):
        store.set("user:1", "quiz_answer_broken", "not json")
        service.submit("1", "What is 2+2?", "4", "4")
        assert [r.answer for r in service.get_results("1").results] == ["4"]
