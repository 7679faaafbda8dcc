from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Article:
    title: str
    text_content: str


@dataclass(frozen=True, slots=True)
class ExtractionResult:
    success: bool
    article: Article | None = None
    error: str = ""


@dataclass(frozen=True, slots=True)
class ImageCandidate:
    image_url: str
    current_alt: str
    selector: str
    is_main_content: bool
    importance_score: int


@dataclass(frozen=True, slots=True)
class LinkCandidate:
    url: str
    link_text: str
    current_title: str
    current_aria_label: str
    selector: str
    is_main_content: bool
    importance_score: int


@dataclass(frozen=True, slots=True)
class ButtonCandidate:
    button_text: str
    current_aria_label: str
    parent_context: str
    selector: str
    is_main_content: bool
    importance_score: int


@dataclass(frozen=True, slots=True)
class ImageAnalysis:
    image_url: str
    current_alt: str
    selector: str
    generated_alt: str | None = None

    @property
    def generated_value(self) -> str | None:
        return self.generated_alt

    @classmethod
    def from_candidate(cls, candidate: ImageCandidate, generated_alt: str | None) -> "ImageAnalysis":
        return cls(
            image_url=candidate.image_url,
            current_alt=candidate.current_alt,
            selector=candidate.selector,
            generated_alt=generated_alt,
        )


@dataclass(frozen=True, slots=True)
class LinkAnalysis:
    url: str
    link_text: str
    current_title: str
    selector: str
    generated_description: str | None = None
    source: str | None = None

    @property
    def generated_value(self) -> str | None:
        return self.generated_description

    @classmethod
    def from_candidate(
        cls,
        candidate: LinkCandidate,
        generated_description: str | None,
        source: str | None = None,
    ) -> "LinkAnalysis":
        return cls(
            url=candidate.url,
            link_text=candidate.link_text,
            current_title=candidate.current_title,
            selector=candidate.selector,
            generated_description=generated_description,
            source=source,
        )


@dataclass(frozen=True, slots=True)
class ButtonAnalysis:
    button_text: str
    current_aria_label: str
    parent_context: str
    selector: str
    generated_description: str | None = None

    @property
    def generated_value(self) -> str | None:
        return self.generated_description

    @classmethod
    def from_candidate(cls, candidate: ButtonCandidate, generated_description: str | None) -> "ButtonAnalysis":
        return cls(
            button_text=candidate.button_text,
            current_aria_label=candidate.current_aria_label,
            parent_context=candidate.parent_context,
            selector=candidate.selector,
            generated_description=generated_description,
        )


@dataclass(slots=True)
class AnalysisReport:
    page_summary: str
    image_analysis: list[ImageAnalysis] = field(default_factory=list)
    link_analysis: list[LinkAnalysis] | None = None
    button_analysis: list[ButtonAnalysis] | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "page_summary": self.page_summary,
            "image_analysis": [asdict(item) for item in self.image_analysis],
        }
        if self.link_analysis is not None:
            payload["link_analysis"] = [asdict(item) for item in self.link_analysis]
        if self.button_analysis is not None:
            payload["button_analysis"] = [asdict(item) for item in self.button_analysis]
        return payload


@dataclass(slots=True)
class EnrichmentAttempt:
    kind: str
    source: str
    selector: str
    strategy: str
    success: bool
    error: str = ""
