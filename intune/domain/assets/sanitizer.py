import re
from typing import Optional

_SAFE_NAME_RE = re.compile(r"[a-zA-Z0-9._-]+")
_SEPARATOR_RE = re.compile(r"[\\/]")


def sanitize_filename(value) -> Optional[str]:
    """Reduce ``value`` to a safe basename or return None.

    Only the final path segment is kept (``/`` and ``\\`` both count as
    separators), so ``/uploads/a.mp3`` yields ``a.mp3``. Values carrying a
    ``..`` segment or a null byte are rejected outright, as is any basename
    with characters outside ``[a-zA-Z0-9._-]`` or equal to ``.``/``..``.
    """
    if not value or not isinstance(value, str):
        return None
    if "\x00" in value:
        return None
    segments = _SEPARATOR_RE.split(value)
    if ".." in segments:
        return None
    candidate = segments[-1]
    if candidate in ("", ".") or not _SAFE_NAME_RE.fullmatch(candidate):
        return None
    return candidate


__all__ = ["sanitize_filename"]
