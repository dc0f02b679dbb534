"""Music metadata, asset lifecycle and URL migration."""

from .errors import MusicError, NotFoundError, ValidationError
from .service import MusicService, MusicUpdate, UNSET
from .url_migration import MigrationReport, UrlMigrationConfig, UrlMigrator

__all__ = [
    "MusicError",
    "NotFoundError",
    "ValidationError",
    "MusicService",
    "MusicUpdate",
    "UNSET",
    "MigrationReport",
    "UrlMigrationConfig",
    "UrlMigrator",
]
