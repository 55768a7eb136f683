from __future__ import annotations

import hashlib
from dataclasses import dataclass

CORRECT_MESSAGE = "Correct!"


@dataclass(frozen=True)
class ScoreResult:
    is_correct: bool
    message: str


def score(submitted_answer: str, expected_answer: str) -> ScoreResult:
    """Compare answers after trimming; case-sensitive."""
    is_correct = submitted_answer.strip() == expected_answer.strip()
    if is_correct:
        return ScoreResult(True, CORRECT_MESSAGE)
    # Interpolated as-is; escaping belongs to whoever renders the message.
    return ScoreResult(False, f"Incorrect. The correct answer is {expected_answer}.")


def question_hash(question: str) -> str:
    """Stable key for a question's text, used to key per-user answer records."""
    return hashlib.sha256(question.encode("utf-8")).hexdigest()
