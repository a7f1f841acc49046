from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import requests

from .parser import FetchError


LOGGER = logging.getLogger(__name__)

REMOTE_PREFIXES = ("http://", "https://")


def is_remote(path: str) -> bool:
    return path.strip().lower().startswith(REMOTE_PREFIXES)


def fetch_text(path: str, timeout: Optional[float] = None) -> str:
    """Return the raw text behind ``path``, an HTTP(S) URL or a local file."""
    if is_remote(path):
        return _fetch_remote(path, timeout)
    return _read_local(Path(path))


def _fetch_remote(url: str, timeout: Optional[float]) -> str:
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as exc:
        raise FetchError(f"Failed to fetch metrics: {exc}") from exc
    if not response.ok:
        raise FetchError(f"Failed to fetch metrics: {response.reason}")
    LOGGER.debug("fetched url=%s status=%s bytes=%s", url, response.status_code, len(response.content))
    return response.text


def _read_local(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8-sig")
    except FileNotFoundError as exc:
        raise FetchError(f"Failed to fetch metrics: Not Found ({path})") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise FetchError(f"Failed to fetch metrics: {exc}") from exc
