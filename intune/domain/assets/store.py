import logging
import os
import re
import secrets
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from werkzeug.datastructures import FileStorage

from intune.domain.assets.sanitizer import sanitize_filename
from intune.observability.metrics import record_asset_deletion, record_asset_upload

logger = logging.getLogger(__name__)

UPLOAD_URL_PREFIX = "/uploads"
_EXTENSION_RE = re.compile(r"[^a-z0-9]")


class DeleteOutcome(str, Enum):
    DELETED = "deleted"
    MISSING = "missing"
    UNSAFE = "unsafe"
    FAILED = "failed"
    EMPTY = "empty"


@dataclass(frozen=True)
class StoredAsset:
    filename: str
    field: str

    @property
    def url(self) -> str:
        return f"{UPLOAD_URL_PREFIX}/{self.filename}"

    def to_dict(self) -> dict:
        return {"filename": self.filename, "fieldname": self.field, "fileUrl": self.url}


class AssetStore:
    """Flat directory of uploaded media addressed by generated filenames."""

    def __init__(self, upload_dir: str):
        self.upload_dir = os.path.realpath(upload_dir)
        os.makedirs(self.upload_dir, exist_ok=True)
        logger.info("AssetStore initialized at %s", self.upload_dir)

    @staticmethod
    def url_for(filename: str) -> str:
        return f"{UPLOAD_URL_PREFIX}/{filename}"

    @staticmethod
    def public_url(stored_url: Optional[str]) -> Optional[str]:
        """Relative ``/uploads/<basename>`` form of a stored URL."""
        if not stored_url:
            return None
        basename = re.split(r"[\\/]", stored_url)[-1]
        return f"{UPLOAD_URL_PREFIX}/{basename}" if basename else None

    def generate_filename(self, field: str, original_name: Optional[str]) -> str:
        ext = os.path.splitext(original_name or "")[1].lower()
        ext = _EXTENSION_RE.sub("", ext)[:10]
        stem = f"{_EXTENSION_RE.sub('', field.lower()) or 'file'}-{int(time.time() * 1000)}-{secrets.token_hex(5)}"
        return f"{stem}.{ext}" if ext else stem

    def resolve(self, filename: str) -> Optional[str]:
        """Absolute path for ``filename`` if it sanitizes and stays inside the store."""
        safe_name = sanitize_filename(filename)
        if safe_name is None:
            return None
        candidate = os.path.realpath(os.path.join(self.upload_dir, safe_name))
        if os.path.commonpath([self.upload_dir, candidate]) != self.upload_dir or candidate == self.upload_dir:
            return None
        return candidate

    def save(self, upload: FileStorage, field: str) -> StoredAsset:
        filename = self.generate_filename(field, upload.filename)
        path = os.path.join(self.upload_dir, filename)
        upload.save(path)
        record_asset_upload(field)
        logger.info("Stored upload %s as %s", upload.filename, filename, extra={"asset": filename})
        return StoredAsset(filename=filename, field=field)

    def delete_url(self, url: Optional[str]) -> DeleteOutcome:
        """Best-effort removal of the file a stored URL points at.

        Never raises. Unsafe names are skipped and logged, missing files are a
        no-op, OS errors are logged and reported as ``FAILED``.
        """
        if not url:
            return DeleteOutcome.EMPTY
        path = self.resolve(url)
        if path is None:
            logger.warning(
                "Skipped deleting asset with unsafe name %r; file may be orphaned",
                url,
                extra={"asset": url, "outcome": DeleteOutcome.UNSAFE.value},
            )
            outcome = DeleteOutcome.UNSAFE
        elif not os.path.exists(path):
            outcome = DeleteOutcome.MISSING
        else:
            try:
                os.remove(path)
                outcome = DeleteOutcome.DELETED
                logger.info("Deleted asset %s", path, extra={"asset": url, "outcome": "deleted"})
            except OSError as exc:
                logger.warning("Could not delete asset %s: %s", path, exc, extra={"asset": url})
                outcome = DeleteOutcome.FAILED
        record_asset_deletion(outcome.value)
        return outcome

    def discard(self, stored: Optional[StoredAsset]) -> None:
        """Remove a just-saved upload whose request was rejected."""
        if stored is not None:
            self.delete_url(stored.url)


__all__ = ["AssetStore", "DeleteOutcome", "StoredAsset", "UPLOAD_URL_PREFIX"]
