from __future__ import annotations

import logging
import shutil
import tempfile
import urllib.request
from pathlib import Path

from rainstash_browse.exceptions import ManifestDownloadError

logger = logging.getLogger(__name__)


def download_url_to_path(
    url: str, destination: Path, *, timeout_seconds: float
) -> None:
    """Download ``url`` to ``destination``, replacing it only on success."""
    logger.info("GET %s", url)
    temporary: Path | None = None
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            dir=destination.parent,
            prefix=f".{destination.name}.",
            delete=False,
        ) as handle:
            temporary = Path(handle.name)
            with urllib.request.urlopen(  # noqa: S310
                url,
                timeout=timeout_seconds,
            ) as response:
                shutil.copyfileobj(response, handle)
        temporary.replace(destination)
    except (OSError, ValueError) as exc:
        # urllib.error.URLError is an OSError; ValueError covers bad URL schemes.
        if temporary is not None:
            temporary.unlink(missing_ok=True)
        raise ManifestDownloadError(f"Failed to download {url}: {exc}") from exc
    except BaseException:
        if temporary is not None:
            temporary.unlink(missing_ok=True)
        raise

    logger.info("Saved %s to %s", url, destination)
