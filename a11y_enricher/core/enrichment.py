from __future__ import annotations

import logging

from a11y_enricher.core.fallback import ImageFetchFallback
from a11y_enricher.core.link_metadata import LinkMetadataResolver
from a11y_enricher.core.metadata import (
    ButtonAnalysis,
    ButtonCandidate,
    EnrichmentAttempt,
    ImageAnalysis,
    ImageCandidate,
    LinkAnalysis,
    LinkCandidate,
)
from a11y_enricher.core.writer import DomWriter
from a11y_enricher.llm.gateway import GenerationGateway
from a11y_enricher.llm.parser import is_fetch_rejected
from a11y_enricher.logging.audit import EnrichmentAuditLogger

logger = logging.getLogger(__name__)


class ElementEnricher:
    """Generates and applies descriptions for single candidates.

    Each ``enrich_*`` method returns an analysis record and never raises for a
    per-element failure; the generated value is ``None`` instead.
    """

    def __init__(
        self,
        gateway: GenerationGateway,
        writer: DomWriter,
        fallback: ImageFetchFallback,
        link_resolver: LinkMetadataResolver | None = None,
        audit_logger: EnrichmentAuditLogger | None = None,
    ) -> None:
        self.gateway = gateway
        self.writer = writer
        self.fallback = fallback
        self.link_resolver = link_resolver
        self.audit_logger = audit_logger

    def enrich_image(self, image: ImageCandidate) -> ImageAnalysis:
        strategy = "direct"
        try:
            try:
                generated_alt = self.gateway.describe_image(image.image_url)
            except Exception as exc:  # noqa: BLE001 - provider SDKs raise arbitrary types.
                if not is_fetch_rejected(exc):
                    raise
                logger.warning("Image URL blocked by server, attempting base64 conversion: %s", image.image_url[:50])
                fallback_image = self.fallback.fetch_as_data_uri(image.image_url, image.selector)
                if fallback_image is None:
                    raise
                strategy = f"data_uri:{fallback_image.strategy}"
                generated_alt = self.gateway.describe_image(fallback_image.data_uri)
        except Exception as exc:  # noqa: BLE001 - one image must not abort the batch.
            logger.error("Failed to generate alt text for image %s: %s", image.image_url[:50], exc)
            self._audit("image", image.image_url, image.selector, strategy, False, exc)
            return ImageAnalysis.from_candidate(image, None)

        self.writer.apply_image_alt(image.selector, generated_alt)
        logger.info("Generated alt text for image %s (%d chars)", image.image_url[:50], len(generated_alt))
        self._audit("image", image.image_url, image.selector, strategy, True)
        return ImageAnalysis.from_candidate(image, generated_alt)

    def enrich_link(self, link: LinkCandidate, page_summary: str) -> LinkAnalysis:
        source = "metadata"
        try:
            metadata = self.link_resolver.resolve(link.url) if self.link_resolver else None
            if metadata is not None and metadata.summary:
                description = metadata.summary
            else:
                source = "generation"
                description = self.gateway.describe_link(page_summary, link.link_text, link.url, link.current_title)
        except Exception as exc:  # noqa: BLE001 - one link must not abort the batch.
            logger.error("Failed to describe link %s: %s", link.url[:50], exc)
            self._audit("link", link.url, link.selector, source, False, exc)
            return LinkAnalysis.from_candidate(link, None)

        self.writer.apply_link_title(link.selector, description)
        self._audit("link", link.url, link.selector, source, True)
        return LinkAnalysis.from_candidate(link, description, source)

    def enrich_button(self, button: ButtonCandidate, page_summary: str) -> ButtonAnalysis:
        label_source = button.button_text or button.current_aria_label or button.selector
        try:
            description = self.gateway.describe_button(
                page_summary,
                button.button_text,
                button.current_aria_label,
                button.parent_context,
            )
        except Exception as exc:  # noqa: BLE001 - one button must not abort the batch.
            logger.error("Failed to describe button %s: %s", label_source[:50], exc)
            self._audit("button", label_source, button.selector, "generation", False, exc)
            return ButtonAnalysis.from_candidate(button, None)

        self.writer.apply_button_label(button.selector, description)
        self._audit("button", label_source, button.selector, "generation", True)
        return ButtonAnalysis.from_candidate(button, description)

    def _audit(
        self,
        kind: str,
        source: str,
        selector: str,
        strategy: str,
        success: bool,
        error: Exception | None = None,
    ) -> None:
        if self.audit_logger is None:
            return
        self.audit_logger.write(
            EnrichmentAttempt(
                kind=kind,
                source=source,
                selector=selector,
                strategy=strategy,
                success=success,
                error=f"{type(error).__name__}: {error}" if error else "",
            )
        )
