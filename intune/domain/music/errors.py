"""Errors raised by the music domain and translated to HTTP by the routes."""

from __future__ import annotations

from typing import Iterable, Optional


class MusicError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"message": self.message}


class ValidationError(MusicError):
    """Malformed identifiers, missing fields, bad values."""

    status_code = 400

    def __init__(
        self,
        message: str,
        *,
        missing: Optional[Iterable[str]] = None,
        errors: Optional[Iterable[str]] = None,
    ):
        super().__init__(message)
        self.missing = list(missing or [])
        self.errors = list(errors or [])

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.missing:
            data["missing"] = self.missing
        if self.errors:
            data["errors"] = self.errors
        return data


class NotFoundError(MusicError):
    status_code = 404


__all__ = ["MusicError", "ValidationError", "NotFoundError"]
