from __future__ import annotations

import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request

from ..middleware.rbac import require_admin
from ..services.settings_service import LessonSettings, SettingsService
from ..services.storage_service import KeyValueStore, get_store
from ..utils.errors import ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/interactive-lesson/v1", tags=["Settings"])


def get_settings_service(store: KeyValueStore = Depends(get_store)) -> SettingsService:
    return SettingsService(store)


@router.get("/settings", response_model=LessonSettings)
def get_settings(
    _admin: Dict[str, Any] = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service),
) -> LessonSettings:
    return service.get()


@router.post("/settings", response_model=LessonSettings)
async def update_settings(
    request: Request,
    _admin: Dict[str, Any] = Depends(require_admin),
    service: SettingsService = Depends(get_settings_service),
) -> LessonSettings:
    raw = await request.body()
    try:
        changes = json.loads(raw) if raw else {}
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationError(
            "Invalid settings data provided.",
            code="rest_invalid_params",
            data={"errors": ["Request body is not valid JSON."]},
        ) from exc
    return service.update(changes)
