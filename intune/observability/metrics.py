from __future__ import annotations

from flask import Blueprint, Response
from prometheus_client import Counter, generate_latest

metrics_blueprint = Blueprint("metrics_bp", __name__)

CONTENT_TYPE_LATEST = "text/plain; version=0.0.4; charset=utf-8"

ASSET_UPLOADS = Counter(
    "intune_asset_uploads_total",
    "Total number of uploaded media files stored.",
    ["field"],
)
ASSET_DELETIONS = Counter(
    "intune_asset_deletions_total",
    "Asset deletion attempts by outcome.",
    ["outcome"],
)
MUSIC_WRITES = Counter(
    "intune_music_writes_total",
    "Music record mutations by operation.",
    ["operation"],
)
URL_MIGRATION_UPDATES = Counter(
    "intune_url_migration_updates_total",
    "Music records rewritten by the URL migration.",
)


def record_asset_upload(field: str) -> None:
    ASSET_UPLOADS.labels(field=field).inc()


def record_asset_deletion(outcome: str) -> None:
    ASSET_DELETIONS.labels(outcome=outcome).inc()


def record_music_write(operation: str) -> None:
    MUSIC_WRITES.labels(operation=operation).inc()


def record_url_migration(updated: int) -> None:
    if updated > 0:
        URL_MIGRATION_UPDATES.inc(updated)


@metrics_blueprint.route("/metrics")
def metrics_endpoint() -> Response:
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
