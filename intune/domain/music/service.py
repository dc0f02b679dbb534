"""Music record orchestration: metadata in the database, media in the asset store."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, fields
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional

from werkzeug.datastructures import FileStorage

from intune.database.db_manager import Category, Music, db, parse_object_id
from intune.domain.assets import AssetStore, DeleteOutcome, StoredAsset
from intune.domain.music.errors import NotFoundError, ValidationError
from intune.domain.music.text import sanitize_text
from intune.observability.metrics import record_music_write

logger = logging.getLogger(__name__)


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()

# Reported in ``missing`` in this order
REQUIRED_FIELDS = ("title", "artist", "category", "categoryType", "file", "duration", "releaseDate")


@dataclass
class MusicUpdate:
    """Partial update; ``None`` means "leave as is".

    ``description`` distinguishes absent (``UNSET``) from supplied-but-empty,
    which clears the stored description.
    """

    title: Optional[str] = None
    artist: Optional[str] = None
    category: Optional[str] = None
    category_type: Optional[str] = None
    duration: Optional[str] = None
    release_date: Optional[str] = None
    description: Any = UNSET
    file_url: Optional[str] = None
    thumbnail_url: Optional[str] = None

    _WIRE_NAMES = {
        "category_type": "categoryType",
        "release_date": "releaseDate",
        "file_url": "fileUrl",
        "thumbnail_url": "thumbnailUrl",
    }

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "MusicUpdate":
        values: Dict[str, Any] = {}
        for f in fields(cls):
            wire = cls._WIRE_NAMES.get(f.name, f.name)
            if f.name == "description":
                if wire in payload:
                    values["description"] = payload.get(wire)
                continue
            raw = payload.get(wire)
            # Empty strings mean "not supplied" for every other field
            values[f.name] = raw if raw not in (None, "") else None
        return cls(**values)


def _as_str(value) -> str:
    return value.strip() if isinstance(value, str) else str(value)


def _parse_duration(value) -> float:
    try:
        duration = float(value)
    except (TypeError, ValueError):
        duration = math.nan
    if not math.isfinite(duration) or duration < 0:
        raise ValidationError("Invalid duration", errors=["duration must be a non-negative number of seconds"])
    return duration


def _parse_release_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(_as_str(value).replace("Z", "+00:00")).date()
    except ValueError:
        raise ValidationError("Invalid releaseDate", errors=["releaseDate must be an ISO-8601 date"]) from None


class MusicService:
    def __init__(self, asset_store: AssetStore, description_max_length: int = 1000):
        self.assets = asset_store
        self.description_max_length = description_max_length

    # --- serialization ---------------------------------------------------

    def expand(self, music: Music) -> dict:
        """Listing shape: category summary, matching type detail, relative URLs."""
        data = music.to_dict()
        category = music.category
        category_type = category.find_type(music.category_type_id) if category else None
        data["category"] = category.summary() if category else None
        data["categoryType"] = category_type.to_dict() if category_type else None
        data["fileUrl"] = self.assets.public_url(music.file_url)
        data["thumbnailUrl"] = self.assets.public_url(music.thumbnail_url)
        return data

    @staticmethod
    def populated(music: Music) -> dict:
        """Write-response shape: stored fields with the category summary."""
        data = music.to_dict()
        category = db.session.get(Category, music.category_id) if music.category_id else None
        data["category"] = category.summary() if category else None
        return data

    # --- validation helpers ---------------------------------------------

    @staticmethod
    def _require_id(value, label: str) -> str:
        parsed = parse_object_id(value)
        if parsed is None:
            raise ValidationError(f"Invalid {label} ID")
        return parsed

    @staticmethod
    def _check_category_type(category_id: Optional[str], type_id: Optional[str]) -> None:
        if category_id is None:
            return
        category = db.session.get(Category, category_id)
        if category is None:
            raise ValidationError("Category not found", errors=["category does not exist"])
        if type_id is not None and category.find_type(type_id) is None:
            raise ValidationError(
                "Invalid categoryType for category",
                errors=["categoryType must be one of the category's types"],
            )

    def _clean_description(self, value) -> str:
        description = sanitize_text(value)
        if len(description) > self.description_max_length:
            raise ValidationError(f"Description must be {self.description_max_length} characters or fewer")
        return description

    def _get(self, music_id) -> Music:
        parsed = self._require_id(music_id, "music")
        music = db.session.get(Music, parsed)
        if music is None:
            raise NotFoundError("Music not found")
        return music

    # --- operations ------------------------------------------------------

    def list_music(self, category_id: Optional[str] = None) -> List[dict]:
        query = Music.query
        if category_id is not None:
            parsed = self._require_id(category_id, "category")
            query = query.filter(Music.category_id == parsed)
        records = query.order_by(Music.created_at.desc()).all()
        if category_id is not None and not records:
            raise NotFoundError("No music found for this category")
        return [self.expand(music) for music in records]

    def get_music(self, music_id) -> dict:
        return self.expand(self._get(music_id))

    def create_music(
        self,
        payload: Mapping[str, Any],
        audio: Optional[FileStorage],
        thumbnail: Optional[FileStorage],
        user_id: int,
    ) -> dict:
        present = {name: payload.get(name) for name in REQUIRED_FIELDS if name != "file"}
        present["file"] = audio
        missing = [name for name in REQUIRED_FIELDS if not present[name]]
        if missing:
            raise ValidationError("Missing required fields", missing=missing)

        category_id = self._require_id(payload.get("category"), "category")
        category_type_id = self._require_id(payload.get("categoryType"), "categoryType")
        self._check_category_type(category_id, category_type_id)
        duration = _parse_duration(payload.get("duration"))
        release_date = _parse_release_date(payload.get("releaseDate"))
        description = self._clean_description(payload.get("description"))

        stored_audio = self.assets.save(audio, "file")
        stored_thumb = self.assets.save(thumbnail, "thumbnail") if thumbnail else None
        music = Music(
            title=_as_str(payload.get("title")),
            artist=_as_str(payload.get("artist")),
            category_id=category_id,
            category_type_id=category_type_id,
            duration=duration,
            release_date=release_date,
            description=description,
            file_url=stored_audio.url,
            thumbnail_url=stored_thumb.url if stored_thumb else None,
            user_id=user_id,
        )
        db.session.add(music)
        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            self.assets.discard(stored_audio)
            self.assets.discard(stored_thumb)
            raise
        record_music_write("create")
        logger.info("Created music %s (%s)", music.id, music.title, extra={"music_id": music.id})
        return self.populated(music)

    def update_music(
        self,
        music_id,
        changes: MusicUpdate,
        audio: Optional[FileStorage] = None,
        thumbnail: Optional[FileStorage] = None,
    ) -> dict:
        music = self._get(music_id)

        category_id = self._require_id(changes.category, "category") if changes.category else None
        category_type_id = (
            self._require_id(changes.category_type, "categoryType") if changes.category_type else None
        )
        if category_id or category_type_id:
            self._check_category_type(
                category_id or music.category_id,
                category_type_id or music.category_type_id,
            )
        duration = _parse_duration(changes.duration) if changes.duration is not None else None
        release_date = _parse_release_date(changes.release_date) if changes.release_date is not None else None
        description = (
            self._clean_description(changes.description) if changes.description is not UNSET else None
        )

        # Administrative URL correction: stored as given, no file checks
        if changes.file_url:
            music.file_url = changes.file_url
        if changes.thumbnail_url:
            music.thumbnail_url = changes.thumbnail_url
        if changes.title:
            music.title = _as_str(changes.title)
        if changes.artist:
            music.artist = _as_str(changes.artist)
        if category_id:
            music.category_id = category_id
        if category_type_id:
            music.category_type_id = category_type_id
        if duration is not None:
            music.duration = duration
        if release_date is not None:
            music.release_date = release_date
        if description is not None:
            music.description = description

        replaced: List[str] = []
        stored_audio = stored_thumb = None
        if audio:
            stored_audio = self.assets.save(audio, "file")
            if music.file_url:
                replaced.append(music.file_url)
            music.file_url = stored_audio.url
        if thumbnail:
            stored_thumb = self.assets.save(thumbnail, "thumbnail")
            if music.thumbnail_url:
                replaced.append(music.thumbnail_url)
            music.thumbnail_url = stored_thumb.url

        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            self.assets.discard(stored_audio)
            self.assets.discard(stored_thumb)
            raise

        # Old files go only once the record no longer references them
        for old_url in replaced:
            self.assets.delete_url(old_url)
        record_music_write("update")
        logger.info("Updated music %s", music.id, extra={"music_id": music.id})
        return self.populated(music)

    def delete_music(self, music_id) -> Dict[str, str]:
        music = self._get(music_id)
        file_url, thumbnail_url = music.file_url, music.thumbnail_url
        record_id = music.id
        db.session.delete(music)
        db.session.commit()

        cleanup = {
            "file": self.assets.delete_url(file_url).value,
            "thumbnail": self.assets.delete_url(thumbnail_url).value,
        }
        record_music_write("delete")
        if DeleteOutcome.UNSAFE.value in cleanup.values():
            logger.warning("Music %s deleted but some files were left in place: %s", record_id, cleanup)
        else:
            logger.info("Deleted music %s (cleanup=%s)", record_id, cleanup, extra={"music_id": record_id})
        return cleanup

    def upload_asset(self, audio: Optional[FileStorage], thumbnail: Optional[FileStorage]) -> StoredAsset:
        if audio:
            return self.assets.save(audio, "file")
        if thumbnail:
            return self.assets.save(thumbnail, "thumbnail")
        raise ValidationError("No file uploaded")


__all__ = ["MusicService", "MusicUpdate", "UNSET", "REQUIRED_FIELDS"]
