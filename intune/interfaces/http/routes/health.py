from __future__ import annotations

import os

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text

from intune.database.db_manager import db

health_bp = Blueprint("health_bp", __name__)


def _upload_dir_writable() -> bool:
    store = current_app.extensions.get("asset_store")
    if store is None:
        return False
    return os.path.isdir(store.upload_dir) and os.access(store.upload_dir, os.W_OK)


@health_bp.route("/healthz")
def healthz():
    status = 200
    checks = {}

    try:
        db.session.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as exc:  # pragma: no cover - DB failure path
        status = 503
        checks["database"] = f"error: {exc}"

    checks["uploads"] = "ok" if _upload_dir_writable() else "unavailable"

    overall = "ok" if status == 200 else "degraded"
    return jsonify({"status": overall, "checks": checks}), status


@health_bp.route("/readyz")
def readyz():
    ready = _upload_dir_writable()
    payload = {"status": "ready" if ready else "blocked", "uploads_writable": ready}
    return jsonify(payload), 200 if ready else 503
