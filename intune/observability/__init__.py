# noqa: D104 - package initialization
from .logging import configure_structured_logging  # noqa: F401
from .metrics import (  # noqa: F401
    metrics_blueprint,
    record_asset_deletion,
    record_asset_upload,
    record_music_write,
    record_url_migration,
)
from .tracing import init_tracing  # noqa: F401
