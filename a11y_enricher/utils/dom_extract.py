from __future__ import annotations

import logging
import re
from typing import Any, Iterable
from urllib.parse import urljoin

from selenium.common.exceptions import WebDriverException

from a11y_enricher.core.metadata import ButtonCandidate, ImageCandidate, LinkCandidate
from a11y_enricher.core.page_scripts import (
    COLLECT_BUTTONS_SCRIPT,
    COLLECT_IMAGES_SCRIPT,
    COLLECT_LINKS_SCRIPT,
    PageScript,
)
from a11y_enricher.utils.scoring import score_button, score_image, score_link
from a11y_enricher.utils.selector import build_selector, class_tokens, is_main_content

logger = logging.getLogger(__name__)

LINK_LIMIT = 20
BUTTON_LIMIT = 15
MIN_BACKGROUND_SIZE = 50
PARENT_CONTEXT_CHARS = 200

EXCLUDED_IMAGE_MARKERS = (".svg", "data:image/svg", "/ad/", "/ads/", "advertisement", "banner", "tracking")
RASTER_IMAGE_MARKERS = ("image", "http", "jpg", "jpeg", "png", "webp")
EXCLUDED_LINK_SCHEMES = ("javascript:", "mailto:", "tel:")

_CSS_URL = re.compile(r"""url\(\s*['"]?([^'")]+)['"]?\s*\)""")


def is_valid_image_url(url: str) -> bool:
    if not url:
        return False
    lowered = url.lower()
    if any(marker in lowered for marker in EXCLUDED_IMAGE_MARKERS):
        return False
    return any(marker in lowered for marker in RASTER_IMAGE_MARKERS)


def background_image_url(background_image: str) -> str | None:
    if not background_image or background_image == "none":
        return None
    match = _CSS_URL.search(background_image)
    if not match:
        return None
    return match.group(1).strip()


def extract_images(page) -> list[ImageCandidate]:
    payload = _collect(page, COLLECT_IMAGES_SCRIPT)
    candidates = build_image_candidates(payload.get("items", []), payload.get("base_url", ""))
    logger.info("Extracted images: %d", len(candidates))
    return candidates


def extract_links(page) -> list[LinkCandidate]:
    payload = _collect(page, COLLECT_LINKS_SCRIPT)
    candidates = build_link_candidates(payload.get("items", []))
    logger.info("Extracted links: %d", len(candidates))
    return candidates


def extract_buttons(page) -> list[ButtonCandidate]:
    payload = _collect(page, COLLECT_BUTTONS_SCRIPT)
    candidates = build_button_candidates(payload.get("items", []))
    logger.info("Extracted buttons: %d", len(candidates))
    return candidates


def build_image_candidates(items: Iterable[dict[str, Any]], base_url: str = "") -> list[ImageCandidate]:
    images: list[ImageCandidate] = []
    processed_urls: set[str] = set()
    for item in items:
        ancestry = item.get("ancestry") or []
        node = ancestry[0] if ancestry else {}
        class_name = " ".join(class_tokens(node))
        if item.get("kind") == "background":
            url = background_image_url(item.get("background_image", ""))
            if not url or not is_valid_image_url(url):
                continue
            url = _resolve(base_url, url)
            if url in processed_urls:
                continue
            if item.get("rect_width", 0) < MIN_BACKGROUND_SIZE or item.get("rect_height", 0) < MIN_BACKGROUND_SIZE:
                continue
            is_main = is_main_content(ancestry)
            score = score_image(is_main=is_main, class_name=class_name, in_figure=bool(item.get("in_figure")))
            current_alt = item.get("aria_label", "")
        else:
            raw = item.get("src") or item.get("data_src") or item.get("lazy_src") or ""
            if not raw or not is_valid_image_url(raw):
                continue
            url = _resolve(base_url, raw)
            if url in processed_urls:
                continue
            is_main = is_main_content(ancestry)
            score = score_image(
                is_main=is_main,
                class_name=class_name,
                in_figure=bool(item.get("in_figure")),
                width=float(item.get("width") or 0),
                height=float(item.get("height") or 0),
            )
            current_alt = item.get("alt", "")
        processed_urls.add(url)
        images.append(
            ImageCandidate(
                image_url=url,
                current_alt=current_alt,
                selector=build_selector(ancestry),
                is_main_content=is_main,
                importance_score=score,
            )
        )
    images.sort(key=lambda candidate: candidate.importance_score, reverse=True)
    return images


def build_link_candidates(items: Iterable[dict[str, Any]], limit: int = LINK_LIMIT) -> list[LinkCandidate]:
    links: list[LinkCandidate] = []
    seen_selectors: set[str] = set()
    for item in items:
        raw_href = (item.get("raw_href") or "").strip()
        href = item.get("href") or raw_href
        if not raw_href or raw_href.startswith("#"):
            continue
        if raw_href.lower().startswith(EXCLUDED_LINK_SCHEMES):
            continue
        text = " ".join((item.get("text") or "").split())
        if not text:
            continue
        ancestry = item.get("ancestry") or []
        selector = build_selector(ancestry)
        if selector in seen_selectors:
            continue
        seen_selectors.add(selector)
        node = ancestry[0] if ancestry else {}
        is_main = is_main_content(ancestry)
        links.append(
            LinkCandidate(
                url=href,
                link_text=text,
                current_title=item.get("title", ""),
                current_aria_label=item.get("aria_label", ""),
                selector=selector,
                is_main_content=is_main,
                importance_score=score_link(
                    is_main=is_main,
                    class_name=" ".join(class_tokens(node)),
                    text=text,
                ),
            )
        )
    links.sort(key=lambda candidate: candidate.importance_score, reverse=True)
    return links[:limit]


def build_button_candidates(items: Iterable[dict[str, Any]], limit: int = BUTTON_LIMIT) -> list[ButtonCandidate]:
    buttons: list[ButtonCandidate] = []
    seen_selectors: set[str] = set()
    for item in items:
        ancestry = item.get("ancestry") or []
        selector = build_selector(ancestry)
        if not selector or selector in seen_selectors:
            continue
        seen_selectors.add(selector)
        node = ancestry[0] if ancestry else {}
        text = " ".join((item.get("text") or "").split())
        aria_label = item.get("aria_label", "")
        is_main = is_main_content(ancestry)
        buttons.append(
            ButtonCandidate(
                button_text=text,
                current_aria_label=aria_label,
                parent_context=" ".join((item.get("parent_context") or "").split())[:PARENT_CONTEXT_CHARS],
                selector=selector,
                is_main_content=is_main,
                importance_score=score_button(
                    is_main=is_main,
                    class_name=" ".join(class_tokens(node)),
                    text=text,
                    aria_label=aria_label,
                ),
            )
        )
    buttons.sort(key=lambda candidate: candidate.importance_score, reverse=True)
    return buttons[:limit]


def _collect(page, script: PageScript) -> dict[str, Any]:
    try:
        payload = page.run(script)
    except WebDriverException as exc:
        logger.error("Page script %s failed: %s", script.name, exc)
        return {}
    return payload or {}


def _resolve(base_url: str, url: str) -> str:
    if not base_url or url.startswith("data:"):
        return url
    return urljoin(base_url, url)
