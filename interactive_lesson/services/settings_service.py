"""
Site-wide plugin settings.

Settings are one JSON document stored under ``interactive-lesson`` in the
``site`` scope of the key-value store and described by the typed
``LessonSettings`` model.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Literal

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as SchemaValidationError

from ..utils.errors import ValidationError
from .storage_service import SITE_SCOPE, KeyValueStore

logger = logging.getLogger(__name__)

OPTION_NAME = "interactive-lesson"


class LessonSettings(BaseModel):
    model_config = ConfigDict(extra="forbid", strict=True)

    setting3: bool = False
    quiz_block: bool = False
    setting5: Literal["option-1", "option-2"] = "option-1"


class SettingsService:
    def __init__(self, kv: KeyValueStore) -> None:
        self.kv = kv

    def get(self) -> LessonSettings:
        raw = self.kv.get(SITE_SCOPE, OPTION_NAME)
        if not raw:
            return LessonSettings()
        try:
            stored = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored settings are not valid JSON; using defaults")
            return LessonSettings()
        if not isinstance(stored, dict):
            return LessonSettings()

        # Keep each stored value that still validates on its own.
        settings = LessonSettings()
        for name in LessonSettings.model_fields:
            if name not in stored:
                continue
            try:
                settings = LessonSettings.model_validate({**settings.model_dump(), name: stored[name]})
            except SchemaValidationError:
                logger.warning(f"Dropping invalid stored setting {name!r}")
        return settings

    def update(self, changes: Dict[str, Any]) -> LessonSettings:
        """Merge ``changes`` into the current settings and persist them.

        Raises:
            ValidationError: ``rest_invalid_params`` when a field is unknown or
                has the wrong type.
        """
        if not isinstance(changes, dict):
            raise ValidationError(
                "Invalid settings data provided.",
                code="rest_invalid_params",
                data={"errors": ["Settings must be a JSON object."]},
            )
        merged = {**self.get().model_dump(), **changes}
        try:
            updated = LessonSettings.model_validate(merged)
        except SchemaValidationError as e:
            errors = [
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            ]
            raise ValidationError(
                "Invalid settings data provided.",
                code="rest_invalid_params",
                data={"errors": errors},
            ) from e

        self.kv.set(SITE_SCOPE, OPTION_NAME, updated.model_dump_json())
        logger.info(f"Settings updated: {sorted(changes)}")
        return updated
