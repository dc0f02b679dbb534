"""Batch rewrite of persisted media URLs after the serving host changes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlparse

from sqlalchemy import or_

from intune.database.db_manager import Music, db
from intune.domain.music.errors import ValidationError
from intune.observability.metrics import record_url_migration

logger = logging.getLogger(__name__)

_URL_FIELDS = ("file_url", "thumbnail_url")


@dataclass(frozen=True)
class UrlMigrationConfig:
    old_base_url: Optional[str] = None
    new_base_url: Optional[str] = None

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "UrlMigrationConfig":
        """Resolve from app config; ``PRODUCTION_URL`` backs up ``NEW_BASE_URL``."""
        return cls(
            old_base_url=(config.get("OLD_BASE_URL") or None),
            new_base_url=(config.get("NEW_BASE_URL") or config.get("PRODUCTION_URL") or None),
        )


@dataclass(frozen=True)
class MigrationReport:
    total_found: int
    updated_count: int

    def to_dict(self) -> dict:
        return {"totalFound": self.total_found, "updatedCount": self.updated_count}


class UrlMigrator:
    def __init__(self, config: UrlMigrationConfig):
        self.config = config

    def _old_hostname(self) -> str:
        if not self.config.old_base_url or not self.config.new_base_url:
            raise ValidationError(
                "Missing configuration. Please set OLD_BASE_URL and NEW_BASE_URL (or PRODUCTION_URL)"
            )
        hostname = urlparse(self.config.old_base_url).hostname
        if not hostname:
            raise ValidationError("Invalid OLD_BASE_URL format in configuration")
        return hostname

    def _rewrite(self, value: Optional[str], hostname: str) -> Optional[str]:
        """New value for ``value`` or None when it should stay untouched."""
        old_base, new_base = self.config.old_base_url, self.config.new_base_url
        if not value or hostname not in value:
            return None
        # When the new base extends the old one, migrated values still contain the old base
        if new_base.startswith(old_base) and new_base in value:
            return None
        rewritten = value.replace(old_base, new_base, 1)
        return rewritten if rewritten != value else None

    def run(self) -> MigrationReport:
        """Rewrite matching records one by one, committing each before the next.

        Not atomic across records: an interrupted run can simply be repeated,
        already-migrated URLs no longer match the old host.
        """
        hostname = self._old_hostname()
        records = (
            Music.query.filter(
                or_(
                    Music.file_url.contains(hostname, autoescape=True),
                    Music.thumbnail_url.contains(hostname, autoescape=True),
                )
            )
            .order_by(Music.created_at)
            .all()
        )
        logger.info("Found %d records referencing %s", len(records), hostname)

        updated = 0
        for music in records:
            changes: Dict[str, str] = {}
            for field in _URL_FIELDS:
                new_value = self._rewrite(getattr(music, field), hostname)
                if new_value is not None:
                    changes[field] = new_value
            if not changes:
                continue
            for field, value in changes.items():
                setattr(music, field, value)
            db.session.commit()
            updated += 1

        record_url_migration(updated)
        logger.info("Updated %d of %d records", updated, len(records))
        return MigrationReport(total_found=len(records), updated_count=updated)


__all__ = ["UrlMigrationConfig", "UrlMigrator", "MigrationReport"]
