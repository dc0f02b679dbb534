import os
import logging
import threading
import time
from collections import defaultdict, deque
from datetime import datetime
from uuid import uuid4

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from flask import Flask, request, jsonify, g
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from config import Config
from intune.auth import init_auth
from intune.database.db_manager import initialize_database
from intune.domain.assets import AssetStore
from intune.domain.music import MusicService, UrlMigrationConfig, UrlMigrator
from intune.interfaces.http.routes import (
    category_bp,
    health_bp,
    music_bp,
    uploads_bp,
)
from intune.observability import configure_structured_logging, metrics_blueprint, init_tracing


logger = logging.getLogger(__name__)


def configure_logging(log_dir: str) -> str:
    """
    Configure root logging with:
      - FileHandler (INFO+) to a new file per run: log-YYYY-MM-DD-HH-MM-SS
      - StreamHandler (WARNING+) to console when ENABLE_CONSOLE_LOGS is on
      - Werkzeug/Flask loggers routed to root

    Returns the path to the created log file.
    """
    os.makedirs(log_dir, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
    log_path = os.path.join(log_dir, f"log-{timestamp}")

    root = logging.getLogger()
    root.setLevel(logging.INFO)

    # Preserve structured handlers; remove existing FileHandlers to avoid duplicates
    root.handlers = [h for h in root.handlers if not isinstance(h, logging.FileHandler)]

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_handler = logging.FileHandler(log_path, encoding='utf-8')
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)
    root.addHandler(file_handler)

    if Config.ENABLE_CONSOLE_LOGS:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    for name in ("werkzeug", "flask.app"):
        _l = logging.getLogger(name)
        _l.setLevel(logging.INFO)
        _l.handlers = []
        _l.propagate = True

    return log_path


def _sweep_idle_buckets(buckets, threshold: float) -> None:
    for key in [key for key, bucket in buckets.items() if not bucket or bucket[-1] <= threshold]:
        del buckets[key]


def _install_rate_limiter(app: Flask) -> None:
    limit = app.config['RATE_LIMIT_REQUESTS']
    window = app.config['RATE_LIMIT_WINDOW_SECONDS']
    prefix = app.config.get('RATE_LIMIT_PATH_PREFIX') or '/'
    if not app.config['ENABLE_RATE_LIMITING'] or limit <= 0 or window <= 0:
        return

    rate_limit_state = {
        'lock': threading.RLock(),
        'buckets': defaultdict(deque),
        'last_sweep': time.time(),
    }
    app.extensions['rate_limiter'] = rate_limit_state

    @app.before_request
    def _apply_rate_limit():
        # Skip rate limiting for CORS preflight and paths outside the guarded prefix
        if request.method == "OPTIONS" or not request.path.startswith(prefix):
            return None
        # remote_addr reflects X-Forwarded-For only behind ProxyFix (TRUSTED_PROXY_COUNT)
        identifier = request.remote_addr or 'unknown'
        now = time.time()
        threshold = now - window
        with rate_limit_state['lock']:
            buckets = rate_limit_state['buckets']
            if now - rate_limit_state['last_sweep'] >= window:
                _sweep_idle_buckets(buckets, threshold)
                rate_limit_state['last_sweep'] = now
            bucket = buckets[identifier]
            while bucket and bucket[0] <= threshold:
                bucket.popleft()
            if len(bucket) >= limit:
                app.logger.warning(
                    "Rate limit exceeded",
                    extra={"policy": "rate_limit", "remote_addr": identifier},
                )
                return jsonify(
                    {
                        "error": "rate_limited",
                        "message": "Too many file operation requests from this IP, please try again later.",
                    }
                ), 429
            bucket.append(now)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(404)
    def _not_found(exc):
        if request.path.startswith('/api/'):
            return jsonify({"message": f"Not Found - {request.path}"}), 404
        return exc

    @app.errorhandler(413)
    def _too_large(exc):
        limit_mb = app.config.get('MAX_UPLOAD_MB')
        return jsonify({"message": f"Upload exceeds the {limit_mb} MB limit"}), 413

    @app.errorhandler(HTTPException)
    def _http_error(exc):
        if request.path.startswith('/api/'):
            return jsonify({"message": exc.description or exc.name}), exc.code
        return exc


def create_app(overrides=None):
    app = Flask(__name__, instance_path=os.path.join(os.path.dirname(os.path.abspath(__file__)), 'instance'))
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)
    proxy_count = app.config.get('TRUSTED_PROXY_COUNT', 0)
    if proxy_count > 0:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=proxy_count, x_proto=proxy_count, x_host=proxy_count)
    configure_structured_logging(app)
    init_tracing(app)

    @app.before_request
    def _assign_request_id():
        g.request_id = request.headers.get('X-Request-ID') or uuid4().hex

    @app.after_request
    def _inject_request_id(response):
        if getattr(g, 'request_id', None):
            response.headers.setdefault('X-Request-ID', g.request_id)
        return response

    allowed_origins = sorted({
        origin.strip()
        for origin in app.config['CORS_ALLOWED_ORIGINS']
        if origin and origin.strip() and origin.strip() != "*"
    })
    CORS(
        app,
        resources={r"/api/*": {"origins": allowed_origins}, r"/uploads/*": {"origins": allowed_origins}},
        supports_credentials=True,
        allow_headers=["Content-Type", "Authorization", "Accept", "Range", "If-Range"],
        expose_headers=["Content-Range", "Accept-Ranges", "Content-Length"],
    )

    _install_rate_limiter(app)

    csp_policy = app.config.get('CONTENT_SECURITY_POLICY')
    if csp_policy:

        @app.after_request
        def _apply_csp(response):
            response.headers.setdefault('Content-Security-Policy', csp_policy)
            return response

    _register_error_handlers(app)

    initialize_database(app)
    init_auth(app)

    # Build domain services at the app boundary; routes read them from app.extensions
    asset_store = AssetStore(app.config['UPLOAD_DIR'])
    app.extensions['asset_store'] = asset_store
    app.extensions['music_service'] = MusicService(
        asset_store,
        description_max_length=app.config['DESCRIPTION_MAX_LENGTH'],
    )
    # Hosts are resolved once here, not per request
    migration_config = UrlMigrationConfig.from_mapping(app.config)
    app.extensions['url_migrator'] = UrlMigrator(migration_config)
    if not migration_config.old_base_url:
        app.logger.info("OLD_BASE_URL not set; URL migration will be rejected until configured.")

    app.register_blueprint(music_bp)
    app.register_blueprint(category_bp)
    app.register_blueprint(uploads_bp)
    app.register_blueprint(metrics_blueprint)
    app.register_blueprint(health_bp)

    @app.route('/')
    def index():
        return jsonify({"status": "ok", "message": "API is running...."})

    return app


if __name__ == '__main__':
    # Configure logging:
    # - In debug with reloader: only in the child process to avoid duplicate files
    # - In non-debug: always configure here
    log_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'logs')
    if not Config.DEBUG or os.environ.get('WERKZEUG_RUN_MAIN') == 'true':
        log_file_path = configure_logging(log_dir)
        logger.info("File logging initialized at %s", log_file_path)

    app = create_app()
    # Route app.logger through root handlers, keep levels consistent
    app.logger.handlers = []
    app.logger.setLevel(logging.INFO)
    app.logger.propagate = True
    logger.info("Starting Flask application on port %s...", Config.PORT)
    app.run(debug=Config.DEBUG, host='0.0.0.0', port=Config.PORT, threaded=True)
