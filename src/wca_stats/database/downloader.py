"""Download and unpack the WCA SQL export."""

from __future__ import annotations

import logging
import shutil
import zipfile
from pathlib import Path
from typing import Iterable

import requests

from ..errors import ProvisioningError


LOGGER = logging.getLogger(__name__)

DOWNLOAD_CHUNK_BYTES = 1024 * 1024
DOWNLOAD_TIMEOUT = 60


def download_export(url: str, dest: str | Path, timeout: float = DOWNLOAD_TIMEOUT) -> Path:
    """Stream a remote file to disk.

    Args:
        url: Source URL
        dest: Destination file (parent directories are created)
        timeout: Connect/read timeout in seconds

    Returns:
        Path of the downloaded file

    Raises:
        ProvisioningError: On any HTTP or network failure
    """
    dest = Path(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)

    LOGGER.info("Downloading %s", url)
    try:
        with requests.get(url, stream=True, timeout=timeout) as resp:
            resp.raise_for_status()
            with open(dest, "wb") as f:
                for chunk in resp.iter_content(chunk_size=DOWNLOAD_CHUNK_BYTES):
                    if chunk:
                        f.write(chunk)
    except requests.RequestException as e:
        raise ProvisioningError(f"Download failed for {url}: {e}") from e

    LOGGER.info("Downloaded %.1f MB to %s", dest.stat().st_size / (1024 * 1024), dest)
    return dest


def extract_sql(zip_path: str | Path, sql_path: str | Path) -> Path:
    """Extract the SQL dump from the export archive.

    The first ``.sql`` member is written to ``sql_path``; other members are
    skipped.

    Raises:
        ProvisioningError: If the archive is invalid or has no ``.sql`` member
    """
    zip_path = Path(zip_path)
    sql_path = Path(sql_path)

    LOGGER.info("Extracting SQL dump from %s", zip_path)
    try:
        with zipfile.ZipFile(zip_path) as archive:
            members = [m for m in archive.infolist() if m.filename.endswith(".sql") and not m.is_dir()]
            if not members:
                raise ProvisioningError(f"No .sql file found in {zip_path}")
            sql_path.parent.mkdir(parents=True, exist_ok=True)
            with archive.open(members[0]) as src, open(sql_path, "wb") as dst:
                shutil.copyfileobj(src, dst)
    except zipfile.BadZipFile as e:
        raise ProvisioningError(f"Not a valid zip archive: {zip_path}") from e

    return sql_path


def remove_files(paths: Iterable[str | Path]) -> None:
    """Delete temporary files, warning instead of failing."""
    for path in paths:
        try:
            Path(path).unlink(missing_ok=True)
        except OSError as e:
            LOGGER.warning("Could not remove %s: %s", path, e)
