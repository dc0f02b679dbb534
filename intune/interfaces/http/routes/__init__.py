"""Route blueprints exposed via Flask."""

from .auth import auth_bp
from .categories import category_bp
from .health import health_bp
from .music import music_bp
from .uploads import uploads_bp

__all__ = [
    "auth_bp",
    "category_bp",
    "health_bp",
    "music_bp",
    "uploads_bp",
]
