from __future__ import annotations


class AnalysisError(RuntimeError):
    """Raised when an accessibility analysis run cannot complete."""


class ContentExtractionError(AnalysisError):
    """Raised when the page content extractor reports failure."""


class ConfigurationError(AnalysisError):
    """Raised when the provider or model configuration is missing or invalid."""


class GenerationError(RuntimeError):
    """Raised when a generation provider call fails."""

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        code: str | None = None,
        detail: str = "",
    ) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
        self.detail = detail
