from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class SubmissionResponse(BaseModel):
    success: bool = True
    answer: str
    message: str


class QuizResultItem(BaseModel):
    question_hash: str
    answer: str
    is_correct: bool
    submitted_at: Optional[datetime] = None


class ResultsResponse(BaseModel):
    success: bool = True
    results: List[QuizResultItem] = Field(default_factory=list)
    total_score: int = Field(0, ge=0)
