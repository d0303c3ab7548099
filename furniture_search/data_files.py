"""Fetching the catalog export when it is not present locally."""
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from urllib.error import URLError
from urllib.request import urlopen

logger = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT_SECONDS = 60


def ensure_data_file(path: str | Path, source_url: str | None = None) -> Path:
    """Return ``path``, downloading the catalog from ``source_url`` first if needed.

    The download lands in a ``.part`` sibling and is renamed on success, so an
    interrupted transfer never leaves a truncated catalog behind.
    """
    file_path = Path(path)
    if file_path.exists():
        return file_path
    if not source_url:
        raise FileNotFoundError(f"Catalog file missing and CATALOG_SOURCE_URL not set: {file_path}")

    logger.info("Downloading catalog %s from %s", file_path, source_url)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    partial = file_path.with_name(file_path.name + ".part")
    try:
        with urlopen(source_url, timeout=DOWNLOAD_TIMEOUT_SECONDS) as response, partial.open("wb") as handle:
            shutil.copyfileobj(response, handle)
        partial.replace(file_path)
    except (OSError, URLError) as exc:
        partial.unlink(missing_ok=True)
        raise RuntimeError(f"Failed to download catalog {source_url} -> {file_path}") from exc
    logger.info("Catalog saved to %s (%s bytes)", file_path, file_path.stat().st_size)
    return file_path
