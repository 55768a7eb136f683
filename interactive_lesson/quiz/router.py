from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request

from ..middleware.rbac import get_current_user_id
from ..services.storage_service import KeyValueStore, get_store
from ..utils.errors import AuthError, ValidationError
from ..utils.text import esc_html
from .schemas import ResultsResponse, SubmissionResponse
from .service import QuizService
from .store import AnswerStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quiz/v1", tags=["Quiz"])


def get_quiz_service(store: KeyValueStore = Depends(get_store)) -> QuizService:
    return QuizService(AnswerStore(store))


async def _read_json_body(request: Request) -> Dict[str, Any]:
    raw = await request.body()
    if not raw:
        return {}
    try:
        body = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        logger.warning(f"Bad JSON in quiz submission ({exc})")
        raise ValidationError("Missing required parameters.") from exc
    if not isinstance(body, dict):
        raise ValidationError("Missing required parameters.")
    return body


@router.post("/submit", response_model=SubmissionResponse, summary="Submit a quiz answer")
async def submit_answer(
    request: Request,
    user_id: Optional[str] = Depends(get_current_user_id),
    service: QuizService = Depends(get_quiz_service),
) -> SubmissionResponse:
    # Authentication is checked before the body so anonymous callers always get 403.
    if user_id is None:
        raise AuthError("You must be logged in to take the quiz.")
    body = await _read_json_body(request)
    return service.submit(
        user_id,
        body.get("question", ""),
        body.get("answer", ""),
        body.get("correct_answer", ""),
    )


@router.get("/results", response_model=ResultsResponse, summary="Get the caller's quiz results")
async def get_results(
    user_id: Optional[str] = Depends(get_current_user_id),
    service: QuizService = Depends(get_quiz_service),
) -> ResultsResponse:
    results = service.get_results(user_id)
    for item in results.results:
        item.answer = esc_html(item.answer)
    return results
