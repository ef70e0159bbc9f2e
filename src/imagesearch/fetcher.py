"""Retrieval of the newline-delimited candidate image list."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from imagesearch.errors import FetchError

if TYPE_CHECKING:
    from imagesearch.config import Settings

logger = logging.getLogger(__name__)


def parse_image_list(text: str) -> list[str]:
    """Split a candidate list into image URLs, one per non-blank line, in order."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def fetch_image_list(url: str | None, settings: Settings, client: httpx.Client | None = None) -> list[str]:
    """Download the candidate list, falling back to ``settings.list_url``.

    Raises:
        FetchError: If the list cannot be downloaded or decoded.
    """
    list_url = url or settings.list_url
    logger.info("Building index from %s", list_url)

    try:
        if client is None:
            response = httpx.get(list_url, timeout=settings.request_timeout, follow_redirects=True)
        else:
            response = client.get(list_url)
        response.raise_for_status()
        text = response.content.decode(response.encoding or "utf-8")
    except httpx.HTTPError as exc:
        raise FetchError(f"Could not retrieve image urls from {list_url}: {exc}") from exc
    except (UnicodeDecodeError, LookupError) as exc:
        raise FetchError(f"Could not decode image list from {list_url}: {exc}") from exc

    images = parse_image_list(text)
    logger.info("%d urls found.", len(images))
    return images
