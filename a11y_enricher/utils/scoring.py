from __future__ import annotations

MAIN_CONTENT_BONUS = 50

IMAGE_FEATURE_HINTS = ("hero", "featured", "main", "primary")
LINK_PRIMARY_HINTS = ("primary", "cta")
BUTTON_PRIMARY_HINTS = ("primary", "cta", "submit")
GENERIC_LINK_PHRASES = {"read more", "click here", "more"}


def clamp_score(score: float) -> int:
    return int(max(0, min(100, round(score))))


def score_image(
    *,
    is_main: bool,
    class_name: str,
    in_figure: bool,
    width: float | None = None,
    height: float | None = None,
) -> int:
    """Scores an image; ``width``/``height`` are only given for ``<img>`` nodes."""

    score = MAIN_CONTENT_BONUS if is_main else 0
    if width is not None and height is not None:
        if width > 300 and height > 200:
            score += 30
        elif width > 150 and height > 100:
            score += 15
        if width < 50 or height < 50:
            score -= 30
    if _contains_any(class_name, IMAGE_FEATURE_HINTS):
        score += 25
    if in_figure:
        score += 15
    return clamp_score(score)


def score_link(*, is_main: bool, class_name: str, text: str) -> int:
    score = MAIN_CONTENT_BONUS if is_main else 0
    if _contains_any(class_name, LINK_PRIMARY_HINTS):
        score += 30
    length = len(text.strip())
    if 4 <= length <= 99:
        score += 20
    elif length <= 3:
        score -= 20
    if _normalize_phrase(text) in GENERIC_LINK_PHRASES:
        score -= 10
    return clamp_score(score)


def score_button(*, is_main: bool, class_name: str, text: str, aria_label: str) -> int:
    score = MAIN_CONTENT_BONUS if is_main else 0
    if _contains_any(class_name, BUTTON_PRIMARY_HINTS):
        score += 30
    if has_good_aria_label(aria_label):
        score -= 20
    stripped = text.strip()
    if not stripped:
        # Icon-only controls need a label the most.
        score += 30
    elif len(stripped) <= 3:
        score += 20
    return clamp_score(score)


def has_good_aria_label(aria_label: str) -> bool:
    return len(aria_label.strip()) >= 4


def _contains_any(class_name: str, hints: tuple[str, ...]) -> bool:
    lowered = class_name.lower()
    return any(hint in lowered for hint in hints)


def _normalize_phrase(text: str) -> str:
    return " ".join(text.lower().split()).strip(" .…›»→>")
