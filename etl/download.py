"""PDF download for article links."""
from __future__ import annotations

from pathlib import Path

import requests
import structlog

from etl.exceptions import IngestionError, RateLimitedError

logger = structlog.get_logger("etl.download")


def pdf_url(link: str) -> str:
    """Article links end with a slash; the PDF lives at ``<link>pdf``."""
    return f"{link}pdf"


def download_pdf(
    link: str,
    dest: str | Path,
    *,
    timeout: float = 60.0,
    user_agent: str = "Mozilla/5.0",
) -> Path:
    """Download the article PDF to ``dest`` and return its path."""
    url = pdf_url(link)
    dest = Path(dest)
    try:
        response = requests.get(
            url,
            timeout=timeout,
            headers={"User-Agent": user_agent},
            allow_redirects=True,
        )
    except requests.RequestException as e:
        logger.error("PDF download failed", url=url, error=str(e))
        raise IngestionError(f"Download failed: {e}", details={"url": url}) from e

    if response.status_code == 429:
        raise RateLimitedError(f"HTTP 429: {response.reason}", {"url": url})
    if response.status_code != 200:
        logger.error("PDF download failed", url=url, status_code=response.status_code)
        raise IngestionError(
            f"HTTP {response.status_code}: {response.reason}",
            status_code=response.status_code,
            details={"url": url},
        )

    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(response.content)
    logger.info("PDF downloaded", url=url, size_kb=round(len(response.content) / 1024, 2))
    return dest
