from __future__ import annotations

import re
from typing import Any, Mapping, Sequence

MAX_SELECTOR_DEPTH = 5
MAX_CLASS_TOKENS = 2

MAIN_CONTENT_TAGS = {"main", "article"}
MAIN_CONTENT_CLASS_HINTS = ("main", "content", "article")
MAIN_CONTENT_ID_HINTS = ("main", "content")
CHROME_TAGS = {"nav", "aside", "footer", "header"}
CHROME_CLASS_HINTS = ("sidebar", "menu", "nav", "ad", "banner")

_PLAIN_IDENTIFIER = re.compile(r"^-?[A-Za-z_][A-Za-z0-9_-]*$")

Ancestry = Sequence[Mapping[str, Any]]


def css_escape(identifier: str) -> str:
    """Escapes an id or class token for use in a CSS selector."""

    if _PLAIN_IDENTIFIER.match(identifier):
        return identifier
    escaped: list[str] = []
    for index, char in enumerate(identifier):
        if char.isdigit() and (index == 0 or (index == 1 and identifier[0] == "-")):
            escaped.append(f"\\{ord(char):x} ")
        elif char.isalnum() or char in "-_" or ord(char) > 0x7F:
            escaped.append(char)
        else:
            escaped.append(f"\\{char}")
    return "".join(escaped)


def class_tokens(node: Mapping[str, Any]) -> list[str]:
    return [token for token in str(node.get("class_name") or "").split() if token]


def build_selector(ancestry: Ancestry) -> str:
    """Returns a short structural path for the first node of ``ancestry``.

    ``ancestry`` lists the node followed by its ancestors, outward. A node id
    wins outright; otherwise up to five levels of ``tag.class1.class2`` are
    joined with `` > ``, stopping at ``body``.
    """

    if not ancestry:
        return ""
    node_id = str(ancestry[0].get("id") or "")
    if node_id:
        return f"#{css_escape(node_id)}"

    path: list[str] = []
    for node in ancestry:
        tag = str(node.get("tag") or "").lower()
        if not tag or tag == "body":
            break
        classes = class_tokens(node)[:MAX_CLASS_TOKENS]
        segment = tag
        if classes:
            segment += "." + ".".join(css_escape(name) for name in classes)
        path.insert(0, segment)
        if len(path) >= MAX_SELECTOR_DEPTH:
            break
    return " > ".join(path)


def is_main_content(ancestry: Ancestry) -> bool:
    """Classifies a node by its nearest main-content or page-chrome ancestor."""

    for node in ancestry:
        tag = str(node.get("tag") or "").lower()
        class_name = str(node.get("class_name") or "").lower()
        node_id = str(node.get("id") or "").lower()

        if (
            tag in MAIN_CONTENT_TAGS
            or any(hint in class_name for hint in MAIN_CONTENT_CLASS_HINTS)
            or any(hint in node_id for hint in MAIN_CONTENT_ID_HINTS)
        ):
            return True
        if tag in CHROME_TAGS or any(hint in class_name for hint in CHROME_CLASS_HINTS):
            return False
    return False
