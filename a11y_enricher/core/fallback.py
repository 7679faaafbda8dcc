from __future__ import annotations

import logging
from dataclasses import dataclass

from selenium.common.exceptions import WebDriverException

from a11y_enricher.core.page_scripts import SNAPSHOT_IMAGE_SCRIPT

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FallbackImage:
    data_uri: str
    strategy: str
    attempts: tuple[str, ...] = ()


class ImageFetchFallback:
    """Rebuilds an image as a data URI from inside the page.

    A loaded ``<img>`` is snapshotted through a canvas; anything else is
    fetched with the page's own origin and base64 encoded.
    """

    def __init__(self, page) -> None:
        self.page = page

    def fetch_as_data_uri(self, image_url: str, selector: str) -> FallbackImage | None:
        logger.info("Fetching image as base64 from page: %s", image_url[:50])
        try:
            result = self.page.run(SNAPSHOT_IMAGE_SCRIPT, image_url, selector) or {}
        except WebDriverException as exc:
            logger.error("Failed to fetch image as base64: %s", exc)
            return None
        data_uri = result.get("data_uri")
        if not data_uri or not str(data_uri).startswith("data:"):
            logger.error(
                "Image fallback exhausted for %s after %s: %s",
                image_url[:50],
                result.get("attempts", []),
                result.get("error", "no data"),
            )
            return None
        logger.info("Converted image to base64 via %s", result.get("strategy"))
        return FallbackImage(
            data_uri=data_uri,
            strategy=result.get("strategy") or "unknown",
            attempts=tuple(result.get("attempts") or ()),
        )
