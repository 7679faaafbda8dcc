from __future__ import annotations

from a11y_enricher.core.exceptions import GenerationError

FETCH_REJECTED_CODES = {"invalid_image_url", "image_download_failed", "image_url_unreachable"}
# Older provider SDKs only surface these in the message text.
FETCH_REJECTED_MARKERS = ("400", "BadRequestError", "Error while downloading")

_WRAPPING_QUOTES = "\"'“”‘’`"


def is_fetch_rejected(exc: BaseException) -> bool:
    """True when the provider could not download the image it was given."""

    if isinstance(exc, GenerationError):
        if exc.code in FETCH_REJECTED_CODES:
            return True
        if exc.status is not None and exc.status != 400:
            return False
    message = str(exc)
    return any(marker in message for marker in FETCH_REJECTED_MARKERS)


def clean_generated_text(response: str) -> str:
    text = " ".join(str(response).split())
    if len(text) >= 2 and text[0] in _WRAPPING_QUOTES and text[-1] in _WRAPPING_QUOTES:
        text = text[1:-1].strip()
    return text
