from __future__ import annotations

from typing import Optional


class ValidationError(ValueError):
    """Malformed or out-of-range input. ``field`` names the offending input."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict[str, Optional[str]]:
        return {"field": self.field, "message": self.message}


class NotFoundError(LookupError):
    def __init__(self, kind: str, record_id: str) -> None:
        super().__init__(f"{kind} not found: {record_id}")
        self.kind = kind
        self.record_id = record_id
