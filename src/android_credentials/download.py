"""
Tool binary acquisition.

``ensure_tool`` makes sure a file exists at a local path, streaming it from a
URL when it is missing. The download lands in a temp file first, so an
interrupted fetch never leaves a truncated tool behind.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import httpx

from .models import ToolDownloadError
from .reporting import Reporter, default_reporter

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


async def ensure_tool(
    path: str | os.PathLike,
    url: str,
    reporter: Reporter | None = None,
    timeout: float = 60.0,
    client: httpx.AsyncClient | None = None,
) -> Path:
    """
    Return ``path``, downloading it from ``url`` first if it does not exist.

    Args:
        path: Local cache location of the tool
        url: Where to fetch it from
        reporter: Receives the "downloading" notice
        timeout: Request timeout in seconds (ignored when ``client`` is given)
        client: Optional pre-configured client

    Raises:
        ToolDownloadError: Any network, HTTP status, or disk error during fetch
    """
    path = Path(path)
    if path.exists():
        return path

    reporter = reporter or default_reporter()
    reporter.info(f"Downloading {path.name} from {url} to {path}")

    tmp_path = path.with_name(f".{path.name}.part")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if client is not None:
            await _stream_to_file(client, url, tmp_path)
        else:
            async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as owned:
                await _stream_to_file(owned, url, tmp_path)
        os.replace(tmp_path, path)
    except httpx.HTTPStatusError as e:
        _discard(tmp_path)
        raise ToolDownloadError(url, f"HTTP {e.response.status_code}") from e
    except httpx.TimeoutException as e:
        _discard(tmp_path)
        raise ToolDownloadError(url, "request timed out") from e
    except httpx.HTTPError as e:
        _discard(tmp_path)
        raise ToolDownloadError(url, f"network error: {e}") from e
    except OSError as e:
        _discard(tmp_path)
        raise ToolDownloadError(url, f"could not write {path}: {e.strerror or e}") from e

    logger.debug("Saved %s to %s", url, path)
    return path


async def _stream_to_file(client: httpx.AsyncClient, url: str, dest: Path) -> None:
    async with client.stream("GET", url) as response:
        response.raise_for_status()
        with open(dest, "wb") as f:
            async for chunk in response.aiter_bytes(CHUNK_SIZE):
                f.write(chunk)


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Could not remove partial download %s: %s", path, e)
