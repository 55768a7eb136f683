"""
Error taxonomy shared by the quiz, review and settings endpoints.

Every error carries a machine readable ``code`` and a human readable
``message``. The FastAPI exception handler registered in ``index.py`` turns
them into ``{"code", "message", "data": {"status", ...}}`` bodies, the same
shape WordPress uses for ``WP_Error`` responses.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class LessonError(Exception):
    """Base class for errors surfaced as HTTP error responses."""

    status_code: int = 500
    code: str = "internal_error"

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.data = dict(data or {})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "data": {"status": self.status_code, **self.data},
        }


class AuthError(LessonError):
    """Caller is not authenticated, or not allowed to use the resource."""

    status_code = 403
    code = "rest_forbidden"


class ValidationError(LessonError):
    """A required field is missing, empty, or malformed."""

    status_code = 400
    code = "missing_params"


class PersistenceError(LessonError):
    """The key-value store could not be reached or rejected the operation."""

    status_code = 500
    code = "persistence_error"
