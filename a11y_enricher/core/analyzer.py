from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Sequence, TypeVar

from a11y_enricher.config.loader import SettingsStore, resolve_generation_config
from a11y_enricher.config.schema import AnalysisOptions, ModelConfig, ProviderConfig
from a11y_enricher.core.content import ContentExtractor, PageTextExtractor, extract_page_content
from a11y_enricher.core.enrichment import ElementEnricher
from a11y_enricher.core.fallback import ImageFetchFallback
from a11y_enricher.core.link_metadata import LinkMetadataResolver
from a11y_enricher.core.metadata import AnalysisReport
from a11y_enricher.core.writer import DomWriter
from a11y_enricher.llm.gateway import GenerationGateway, create_generation_gateway
from a11y_enricher.logging.audit import EnrichmentAuditLogger
from a11y_enricher.utils.dom_extract import extract_buttons, extract_images, extract_links

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

ProgressCallback = Callable[[str], None]
GatewayFactory = Callable[[ProviderConfig, ModelConfig], GenerationGateway]


def select_for_enrichment(candidates: Sequence[T], limit: int, reverse: bool = True) -> list[T]:
    """Keeps the top ``limit`` candidates, optionally reversed."""

    selected = list(candidates[:limit])
    if reverse:
        selected.reverse()
    return selected


class AccessibilityAnalyzer:
    """Coordinates extraction, ranking, enrichment and write-back for one page."""

    def __init__(
        self,
        settings_store: SettingsStore,
        *,
        content_extractor: ContentExtractor | None = None,
        gateway_factory: GatewayFactory = create_generation_gateway,
        link_resolver: LinkMetadataResolver | None = None,
        audit_logger: EnrichmentAuditLogger | None = None,
        options: AnalysisOptions | None = None,
    ) -> None:
        self.settings_store = settings_store
        self.content_extractor = content_extractor or PageTextExtractor()
        self.gateway_factory = gateway_factory
        self.link_resolver = link_resolver if link_resolver is not None else LinkMetadataResolver()
        self.audit_logger = audit_logger
        self.options = options or settings_store.settings.analysis

    def analyze(self, page, progress: ProgressCallback | None = None) -> AnalysisReport:
        logger.info("Starting accessibility analysis")
        try:
            return self._run(page, progress or (lambda label: None))
        except Exception:
            logger.exception("Accessibility analysis failed")
            raise

    def _run(self, page, report_progress: ProgressCallback) -> AnalysisReport:
        options = self.options

        report_progress("Extracting page content")
        article = extract_page_content(self.content_extractor, page)

        report_progress("Scanning page elements")
        images = select_for_enrichment(extract_images(page), options.image_limit, options.reverse_before_enrichment)
        links = (
            select_for_enrichment(extract_links(page), options.link_limit, options.reverse_before_enrichment)
            if options.analyze_links
            else None
        )
        buttons = (
            select_for_enrichment(extract_buttons(page), options.button_limit, options.reverse_before_enrichment)
            if options.analyze_buttons
            else None
        )

        report_progress("Loading model configuration")
        provider_config, model_config = resolve_generation_config(self.settings_store)
        gateway = self.gateway_factory(provider_config, model_config)

        report_progress("Summarizing page")
        page_summary = gateway.summarize(article.title, article.text_content[: options.summary_excerpt_chars])
        logger.info("Generated page summary")
        context = page_summary[: options.context_excerpt_chars]

        enricher = ElementEnricher(
            gateway,
            DomWriter(page),
            ImageFetchFallback(page),
            link_resolver=self.link_resolver,
            audit_logger=self.audit_logger,
        )

        report_progress("Generating image descriptions")
        image_analysis = self._fan_out(enricher.enrich_image, images)
        logger.info(
            "Completed image analysis: %d of %d",
            sum(1 for item in image_analysis if item.generated_alt is not None),
            len(image_analysis),
        )

        link_analysis = None
        if links is not None:
            report_progress("Describing links")
            link_analysis = self._fan_out(lambda link: enricher.enrich_link(link, context), links)

        button_analysis = None
        if buttons is not None:
            report_progress("Describing buttons")
            button_analysis = self._fan_out(lambda button: enricher.enrich_button(button, context), buttons)

        report_progress("Assembling report")
        report = AnalysisReport(
            page_summary=page_summary,
            image_analysis=image_analysis,
            link_analysis=link_analysis,
            button_analysis=button_analysis,
        )
        logger.info(
            "Completed accessibility analysis: summary %d chars, %d images, %d links, %d buttons",
            len(page_summary),
            len(image_analysis),
            len(link_analysis or []),
            len(button_analysis or []),
        )
        return report

    def _fan_out(self, func: Callable[[T], R], items: Sequence[T]) -> list[R]:
        if not items:
            return []
        with ThreadPoolExecutor(max_workers=min(self.options.max_workers, len(items))) as pool:
            return list(pool.map(func, items))
