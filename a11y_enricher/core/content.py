from __future__ import annotations

import logging
from typing import Protocol

from selenium.common.exceptions import WebDriverException

from a11y_enricher.core.exceptions import ContentExtractionError
from a11y_enricher.core.metadata import Article, ExtractionResult
from a11y_enricher.core.page_scripts import PAGE_TEXT_SCRIPT

logger = logging.getLogger(__name__)


class ContentExtractor(Protocol):
    def extract(self, page) -> ExtractionResult: ...


class PageTextExtractor:
    """Reads the title and primary text of the page (article, main, then body)."""

    def extract(self, page) -> ExtractionResult:
        try:
            payload = page.run(PAGE_TEXT_SCRIPT) or {}
        except WebDriverException as exc:
            return ExtractionResult(success=False, error=str(exc))
        if not payload.get("success"):
            return ExtractionResult(success=False, error="Page has no readable text")
        return ExtractionResult(
            success=True,
            article=Article(
                title=payload.get("title", ""),
                text_content=payload.get("text_content", ""),
            ),
        )


def extract_page_content(extractor: ContentExtractor, page) -> Article:
    result = extractor.extract(page)
    if not result.success or result.article is None:
        logger.error("Content extraction failed: %s", result.error or "no article")
        raise ContentExtractionError("Failed to extract page content")
    return result.article
