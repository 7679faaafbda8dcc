from __future__ import annotations

import logging

from selenium.common.exceptions import WebDriverException

from a11y_enricher.core.page_scripts import APPLY_ATTRIBUTE_SCRIPT

logger = logging.getLogger(__name__)

PROVENANCE_PREFIX = "AI Generated: "


def with_provenance(value: str) -> str:
    if value.startswith(PROVENANCE_PREFIX):
        return value
    return f"{PROVENANCE_PREFIX}{value}"


class DomWriter:
    """Writes generated values back onto elements located by selector.

    Every write returns whether the element was found; stale selectors are
    logged and ignored.
    """

    def __init__(self, page) -> None:
        self.page = page

    def apply_image_alt(self, selector: str, alt_text: str) -> bool:
        return self._apply(selector, "alt", alt_text)

    def apply_link_title(self, selector: str, description: str) -> bool:
        return self._apply(selector, "title", description)

    def apply_button_label(self, selector: str, label: str) -> bool:
        return self._apply(selector, "aria-label", label)

    def _apply(self, selector: str, attribute: str, value: str) -> bool:
        try:
            result = self.page.run(APPLY_ATTRIBUTE_SCRIPT, selector, attribute, with_provenance(value)) or {}
        except WebDriverException as exc:
            logger.error("Failed to apply %s to %s: %s", attribute, selector, exc)
            return False
        if not result.get("found"):
            logger.warning("Element not found for %s write: %s", attribute, selector)
            return False
        logger.info("Applied %s to %s", result.get("attribute", attribute), selector)
        return True
