#!/usr/bin/env python
# config.py
import os
from typing import List

# This assumes config.py is at the root of your project
basedir = os.path.abspath(os.path.dirname(__file__))

_DEFAULT_CSP = (
    "default-src 'self'; style-src 'self' 'unsafe-inline'; "
    "script-src 'self'; img-src 'self' data: https:"
)


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _get_csv_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name)
    source = raw if raw is not None else default
    return [token.strip() for token in source.split(",") if token and token.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'change-me-in-production'

    # Database
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'instance', 'intune.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Uploaded media (audio + thumbnails), served under /uploads
    UPLOAD_DIR = os.getenv('UPLOAD_DIR', os.path.join(basedir, 'uploads'))
    MAX_UPLOAD_MB = max(1, _get_int('MAX_UPLOAD_MB', 50))
    MAX_CONTENT_LENGTH = MAX_UPLOAD_MB * 1024 * 1024
    DESCRIPTION_MAX_LENGTH = _get_int('DESCRIPTION_MAX_LENGTH', 1000)

    # Hosting migration (read once at startup, see POST /api/music/update-urls)
    OLD_BASE_URL = os.getenv('OLD_BASE_URL')
    NEW_BASE_URL = os.getenv('NEW_BASE_URL')
    PRODUCTION_URL = os.getenv('PRODUCTION_URL')

    # HTTP policy
    CORS_ALLOWED_ORIGINS = _get_csv_list(
        'CORS_ALLOWED_ORIGINS',
        'http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000',
    )
    ENABLE_RATE_LIMITING = _get_bool('ENABLE_RATE_LIMITING', True)
    # 50 requests per 15 minutes on /api/music
    RATE_LIMIT_REQUESTS = _get_int('RATE_LIMIT_REQUESTS', 50)
    RATE_LIMIT_WINDOW_SECONDS = _get_int('RATE_LIMIT_WINDOW_SECONDS', 15 * 60)
    RATE_LIMIT_PATH_PREFIX = os.getenv('RATE_LIMIT_PATH_PREFIX', '/api/music')
    # Reverse proxies in front of the app; 0 ignores X-Forwarded-* headers
    TRUSTED_PROXY_COUNT = max(0, _get_int('TRUSTED_PROXY_COUNT', 0))
    CONTENT_SECURITY_POLICY = os.getenv('CONTENT_SECURITY_POLICY', _DEFAULT_CSP)

    # Observability
    OTEL_EXPORTER_OTLP_ENDPOINT = os.getenv('OTEL_EXPORTER_OTLP_ENDPOINT')
    OTEL_EXPORTER_OTLP_HEADERS = os.getenv('OTEL_EXPORTER_OTLP_HEADERS')
    OTEL_EXPORTER_OTLP_INSECURE = _get_bool('OTEL_EXPORTER_OTLP_INSECURE', True)
    OTEL_SERVICE_NAME = os.getenv('OTEL_SERVICE_NAME', 'intune-backend')

    # Runtime behavior
    # Turn Flask debug on/off from env; default off to avoid noisy console
    DEBUG = _get_bool('DEBUG', False)
    # Control console logging; when disabled, logs go only to file
    ENABLE_CONSOLE_LOGS = _get_bool('ENABLE_CONSOLE_LOGS', False)
    PORT = _get_int('PORT', 5000)
