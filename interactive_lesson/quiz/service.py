from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from ..utils.errors import AuthError, ValidationError
from ..utils.text import sanitize_text_field
from .schemas import QuizResultItem, ResultsResponse, SubmissionResponse
from .scorer import question_hash, score
from .store import AnswerStore, QuizAnswerRecord

logger = logging.getLogger(__name__)


def _require_user(user_id: Optional[str]) -> str:
    if user_id is None or str(user_id).strip() == "":
        raise AuthError("You must be logged in to take the quiz.")
    return str(user_id)


class QuizService:
    """Submission and results handling for one request."""

    def __init__(self, answers: AnswerStore) -> None:
        self.answers = answers

    def submit(
        self,
        user_id: Optional[str],
        question: object,
        answer: object,
        correct_answer: object,
    ) -> SubmissionResponse:
        uid = _require_user(user_id)

        question = sanitize_text_field(question)
        answer = sanitize_text_field(answer)
        correct_answer = sanitize_text_field(correct_answer)
        if not question or not answer or not correct_answer:
            raise ValidationError("Missing required parameters.")

        qhash = question_hash(question)
        result = score(answer, correct_answer)

        self.answers.save_record(
            uid,
            QuizAnswerRecord(
                question_hash=qhash,
                answer=answer,
                is_correct=result.is_correct,
                submitted_at=datetime.now(timezone.utc),
            ),
        )
        # Counted on every correct submission, including repeats of a
        # question already answered correctly.
        if result.is_correct:
            total = self.answers.increment_score(uid)
            logger.info(f"Correct answer recorded for user {uid} question {qhash[:12]} (score={total})")
        else:
            logger.info(f"Incorrect answer recorded for user {uid} question {qhash[:12]}")

        return SubmissionResponse(success=True, answer=answer, message=result.message)

    def get_results(self, user_id: Optional[str]) -> ResultsResponse:
        uid = _require_user(user_id)
        records = self.answers.list_records(uid)
        return ResultsResponse(
            success=True,
            results=[
                QuizResultItem(
                    question_hash=r.question_hash,
                    answer=r.answer,
                    is_correct=r.is_correct,
                    submitted_at=r.submitted_at,
                )
                for r in records
            ],
            total_score=self.answers.get_score(uid),
        )
