from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from ..services.storage_service import KeyValueStore, user_scope

logger = logging.getLogger(__name__)

ANSWER_PREFIX = "quiz_answer_"
SCORE_KEY = "quiz_score"


@dataclass
class QuizAnswerRecord:
    question_hash: str
    answer: str
    is_correct: bool
    submitted_at: Optional[datetime] = None


class AnswerStore:
    """
    Per-user quiz answers and running score on top of a ``KeyValueStore``.

    Each record is one JSON document under ``quiz_answer_<hash>`` in the
    user's scope, written with a single ``set`` so a record never mixes
    fields from two submissions. The score lives under ``quiz_score``.
    """

    def __init__(self, kv: KeyValueStore) -> None:
        self.kv = kv

    def save_record(self, user_id: str, record: QuizAnswerRecord) -> None:
        submitted_at = record.submitted_at or datetime.now(timezone.utc)
        document = json.dumps(
            {
                "answer": record.answer,
                "is_correct": record.is_correct,
                "submitted_at": submitted_at.isoformat(),
            }
        )
        self.kv.set(user_scope(user_id), ANSWER_PREFIX + record.question_hash, document)

    def increment_score(self, user_id: str) -> int:
        return self.kv.increment(user_scope(user_id), SCORE_KEY, 1)

    def get_score(self, user_id: str) -> int:
        raw = self.kv.get(user_scope(user_id), SCORE_KEY)
        try:
            return max(int(raw or 0), 0)
        except ValueError:
            logger.warning(f"Non-numeric quiz score for user {user_id}: {raw!r}")
            return 0

    def list_records(self, user_id: str) -> List[QuizAnswerRecord]:
        records: List[QuizAnswerRecord] = []
        for key, raw in self.kv.items(user_scope(user_id), ANSWER_PREFIX):
            qhash = key[len(ANSWER_PREFIX):]
            try:
                document = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning(f"Skipping unreadable quiz record {qhash[:12]} for user {user_id}")
                continue
            if not isinstance(document, dict):
                logger.warning(f"Skipping unreadable quiz record {qhash[:12]} for user {user_id}")
                continue
            records.append(
                QuizAnswerRecord(
                    question_hash=qhash,
                    answer=str(document.get("answer", "")),
                    is_correct=document.get("is_correct") is True,
                    submitted_at=_parse_timestamp(document.get("submitted_at")),
                )
            )
        return records


def _parse_timestamp(raw: Optional[str]) -> Optional[datetime]:
    if not isinstance(raw, str) or not raw:
        return None
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None
