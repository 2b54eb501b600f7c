"""
File-hash disk cache for rendered logbook PDFs.
Key = sha256(flights_json + custom_fields_json) -> PDF bytes.
A cache directory that cannot be used only costs a cache miss.
"""
from __future__ import annotations

import hashlib
import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# Cache directory under backend/cache unless LOGBOOK_CACHE_DIR is set
_CACHE_DIR = Path(__file__).resolve().parent


def logbook_cache_dir() -> Path:
    override = (os.getenv("LOGBOOK_CACHE_DIR") or "").strip()
    return Path(override) if override else _CACHE_DIR / "logbooks"


def _ensure_dir(d: Path) -> None:
    d.mkdir(parents=True, exist_ok=True)


def _logbook_key(request_payload: dict[str, Any]) -> str:
    payload = json.dumps(request_payload, sort_keys=True, default=str)
    return hashlib.sha256(payload.encode()).hexdigest()


def _logbook_path(request_payload: dict[str, Any]) -> Path:
    return logbook_cache_dir() / f"{_logbook_key(request_payload)}.pdf"


def get_cached_logbook(request_payload: dict[str, Any]) -> bytes | None:
    """Return cached PDF bytes, or None."""
    path = _logbook_path(request_payload)
    try:
        _ensure_dir(path.parent)
        if not path.exists():
            return None
        return path.read_bytes()
    except OSError as e:
        logger.warning("[logbook] cache read failed path=%s error=%s", path, e)
        return None


def set_cached_logbook(request_payload: dict[str, Any], pdf_bytes: bytes) -> None:
    """Store PDF bytes in cache."""
    path = _logbook_path(request_payload)
    try:
        _ensure_dir(path.parent)
        path.write_bytes(pdf_bytes)
    except OSError as e:
        logger.warning("[logbook] cache write failed path=%s error=%s", path, e)
