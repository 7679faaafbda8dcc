from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator
from urllib.parse import quote

import pytest
from selenium.common.exceptions import WebDriverException

from a11y_enricher.config.schema import EnvironmentConfig
from a11y_enricher.core.browser import BrowserSession, PageContext
from a11y_enricher.core.link_metadata import LinkMetadata
from a11y_enricher.llm.gateway import GenerationGateway


def node(spec: str) -> dict[str, str]:
    """Parses ``tag#id.class1.class2`` into a serialized ancestry entry."""

    tag, _, rest = spec.partition(".")
    classes = rest.replace(".", " ") if rest else ""
    tag, _, node_id = tag.partition("#")
    return {"tag": tag, "id": node_id, "class_name": classes}


def chain(*specs: str) -> list[dict[str, str]]:
    return [node(spec) for spec in specs] + [node("body"), node("html")]


def img_item(
    src: str,
    *specs: str,
    alt: str = "",
    width: float = 400,
    height: float = 300,
    in_figure: bool = False,
    data_src: str = "",
) -> dict[str, Any]:
    return {
        "kind": "img",
        "src": src,
        "data_src": data_src,
        "lazy_src": "",
        "alt": alt,
        "width": width,
        "height": height,
        "in_figure": in_figure,
        "ancestry": chain(*(specs or ("img", "main"))),
    }


def background_item(url: str, *specs: str, width: float = 200, height: float = 200) -> dict[str, Any]:
    return {
        "kind": "background",
        "background_image": f'url("{url}")',
        "aria_label": "",
        "rect_width": width,
        "rect_height": height,
        "in_figure": False,
        "ancestry": chain(*(specs or ("div.cover", "main"))),
    }


def link_item(href: str, text: str, *specs: str, title: str = "") -> dict[str, Any]:
    return {
        "href": href,
        "raw_href": href,
        "text": text,
        "title": title,
        "aria_label": "",
        "ancestry": chain(*(specs or ("a", "main"))),
    }


def button_item(text: str, *specs: str, aria_label: str = "", parent_context: str = "") -> dict[str, Any]:
    return {
        "tag": "button",
        "text": text,
        "aria_label": aria_label,
        "parent_context": parent_context,
        "ancestry": chain(*(specs or ("button", "main"))),
    }


class FakePage:
    """Answers page scripts by name and keeps a selector -> attributes store."""

    def __init__(
        self,
        *,
        images: list[dict[str, Any]] | None = None,
        links: list[dict[str, Any]] | None = None,
        buttons: list[dict[str, Any]] | None = None,
        title: str = "Example page",
        text: str = "Some readable page text.",
        elements: dict[str, dict[str, Any]] | None = None,
        snapshot: dict[str, Any] | None = None,
        base_url: str = "https://example.com/",
    ) -> None:
        self.payloads = {
            "collect_images": {"base_url": base_url, "items": images or []},
            "collect_links": {"base_url": base_url, "items": links or []},
            "collect_buttons": {"base_url": base_url, "items": buttons or []},
            "page_text": {"success": bool(text), "title": title, "text_content": text},
        }
        self.elements = elements or {}
        self.snapshot = snapshot or {"data_uri": None, "strategy": None, "attempts": ["fetch"], "error": "blocked"}
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self._lock = threading.Lock()

    def run(self, script, *args: Any) -> Any:
        with self._lock:
            self.calls.append((script.name, args))
            if script.name in self.payloads:
                return self.payloads[script.name]
            if script.name == "apply_attribute":
                return self._apply(*args)
            if script.name == "snapshot_image":
                return self.snapshot
        raise AssertionError(f"Unexpected page script: {script.name}")

    def calls_named(self, name: str) -> list[tuple[Any, ...]]:
        return [args for script_name, args in self.calls if script_name == name]

    def attribute(self, selector: str, name: str) -> str | None:
        return self.elements.get(selector, {}).get("attributes", {}).get(name)

    def _apply(self, selector: str, attribute: str, value: str) -> dict[str, Any]:
        element = self.elements.get(selector)
        if element is None:
            return {"found": False, "error": "Element not found"}
        target = attribute
        if attribute == "alt" and element.get("tag") != "img":
            target = "aria-label"
        attributes = element.setdefault("attributes", {})
        changed = attributes.get(target) != value
        attributes[target] = value
        return {"found": True, "attribute": target, "changed": changed}


Response = str | Exception | Callable[..., str]


class FakeGateway(GenerationGateway):
    """Scripted gateway recording every call."""

    def __init__(
        self,
        *,
        summary: Response = "A page about bicycles.",
        image: Response = "A red bicycle.",
        link: Response = "Opens the shop.",
        button: Response = "Open menu",
    ) -> None:
        self.responses = {"summarize": summary, "describe_image": image, "describe_link": link, "describe_button": button}
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self._lock = threading.Lock()

    def summarize(self, title: str, text_excerpt: str) -> str:
        return self._respond("summarize", title, text_excerpt)

    def describe_image(self, image_ref: str) -> str:
        return self._respond("describe_image", image_ref)

    def describe_link(self, page_summary: str, link_text: str, url: str, current_title: str) -> str:
        return self._respond("describe_link", page_summary, link_text, url, current_title)

    def describe_button(self, page_summary: str, button_text: str, current_aria_label: str, parent_context: str) -> str:
        return self._respond("describe_button", page_summary, button_text, current_aria_label, parent_context)

    def calls_named(self, name: str) -> list[tuple[Any, ...]]:
        return [args for call_name, args in self.calls if call_name == name]

    def _respond(self, name: str, *args: Any) -> str:
        with self._lock:
            self.calls.append((name, args))
        response = self.responses[name]
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(*args)
        return response


class StubLinkResolver:
    def __init__(self, metadata: dict[str, LinkMetadata] | None = None) -> None:
        self.metadata = metadata or {}
        self.requested: list[str] = []

    def resolve(self, url: str) -> LinkMetadata | None:
        self.requested.append(url)
        return self.metadata.get(url)


@contextmanager
def managed_page(html: str, browser_name: str = "chrome") -> Iterator[PageContext]:
    session = BrowserSession(EnvironmentConfig(browser=browser_name, headless=True))
    try:
        driver = session.start()
    except WebDriverException as exc:
        pytest.skip(f"WebDriver could not start for {browser_name}: {exc}")
    try:
        yield session.open(driver, "data:text/html;charset=utf-8," + quote(html))
    finally:
        driver.quit()
