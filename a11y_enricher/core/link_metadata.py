from __future__ import annotations

import html as html_lib
import http.client
import logging
import re
from dataclasses import dataclass
from urllib import error, request

logger = logging.getLogger(__name__)

FETCH_ERRORS = (error.URLError, http.client.HTTPException, TimeoutError, ValueError, OSError)

TITLE_META_KEYS = ("og:title", "twitter:title")
DESCRIPTION_META_KEYS = ("og:description", "twitter:description", "description")

_META_TAG = re.compile(r"<meta\b[^>]*>", re.IGNORECASE)
_ATTRIBUTE = re.compile(r"""([\w:-]+)\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+))""")
_TITLE_TAG = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)


@dataclass(frozen=True, slots=True)
class LinkMetadata:
    title: str = ""
    description: str = ""

    @property
    def summary(self) -> str:
        return self.description or self.title


def parse_link_metadata(document: str) -> LinkMetadata:
    """Scrapes title and description meta tags out of raw HTML."""

    meta: dict[str, str] = {}
    for tag in _META_TAG.findall(document):
        attributes = {
            match.group(1).lower(): next(value for value in match.groups()[1:] if value is not None)
            for match in _ATTRIBUTE.finditer(tag)
        }
        key = (attributes.get("property") or attributes.get("name") or "").lower()
        content = _clean(attributes.get("content", ""))
        if key and content and key not in meta:
            meta[key] = content

    title = next((meta[key] for key in TITLE_META_KEYS if meta.get(key)), "")
    if not title:
        match = _TITLE_TAG.search(document)
        title = _clean(match.group(1)) if match else ""
    description = next((meta[key] for key in DESCRIPTION_META_KEYS if meta.get(key)), "")
    return LinkMetadata(title=title, description=description)


class LinkMetadataResolver:
    """Fetches a link target and reads its title/description metadata."""

    user_agent = "Mozilla/5.0 (compatible; a11y-enricher/0.1)"

    def __init__(self, timeout: float = 5.0, max_bytes: int = 512_000) -> None:
        self.timeout = timeout
        self.max_bytes = max_bytes

    def resolve(self, url: str) -> LinkMetadata | None:
        if not url.lower().startswith(("http://", "https://")):
            return None
        try:
            content_type = self._head(url)
        except error.HTTPError as exc:
            logger.debug("HEAD rejected for %s (%s), trying GET", url[:50], exc.code)
            content_type = ""
        except FETCH_ERRORS as exc:
            logger.warning("Metadata fetch failed for %s: %s", url[:50], exc)
            return None
        if content_type and "html" not in content_type.lower():
            return None
        try:
            document = self._get(url)
        except (*FETCH_ERRORS, LookupError) as exc:
            logger.warning("Metadata fetch failed for %s: %s", url[:50], exc)
            return None
        metadata = parse_link_metadata(document)
        if not metadata.summary:
            return None
        return metadata

    def _head(self, url: str) -> str:
        req = request.Request(url, headers={"User-Agent": self.user_agent}, method="HEAD")
        with request.urlopen(req, timeout=self.timeout) as response:
            return response.headers.get("Content-Type", "")

    def _get(self, url: str) -> str:
        req = request.Request(
            url,
            headers={"User-Agent": self.user_agent, "Accept": "text/html"},
            method="GET",
        )
        with request.urlopen(req, timeout=self.timeout) as response:
            charset = response.headers.get_content_charset() or "utf-8"
            raw = response.read(self.max_bytes)
        return raw.decode(charset, errors="replace")


def _clean(value: str) -> str:
    return " ".join(html_lib.unescape(value).split())
