from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

SUPPORTED_PROVIDERS = ("openai", "anthropic", "gemini")
NAVIGATOR_AGENT = "navigator"
PLANNER_AGENT = "planner"


class ProviderConfig(BaseModel):
    api_key: str = ""
    base_url: str | None = None
    model_names: list[str] = Field(default_factory=list)


class ModelConfig(BaseModel):
    provider: str
    model_name: str

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, value: str) -> str:
        normalized = value.lower()
        if normalized not in SUPPORTED_PROVIDERS:
            raise ValueError(f"Unsupported provider: {value}")
        return normalized


class AnalysisOptions(BaseModel):
    image_limit: int = Field(default=5, ge=0)
    link_limit: int = Field(default=5, ge=0)
    button_limit: int = Field(default=5, ge=0)
    reverse_before_enrichment: bool = True
    max_workers: int = Field(default=8, ge=1)
    analyze_links: bool = True
    analyze_buttons: bool = True
    summary_excerpt_chars: int = 1500
    context_excerpt_chars: int = 500


class EnvironmentConfig(BaseModel):
    browser: str = "chrome"
    headless: bool = True
    page_load_timeout_seconds: int = 30
    script_timeout_seconds: int = 20

    @field_validator("browser")
    @classmethod
    def validate_browser(cls, value: str) -> str:
        normalized = value.lower()
        if normalized not in {"chrome", "firefox"}:
            raise ValueError(f"Unsupported browser: {value}")
        return normalized


class Settings(BaseModel):
    providers: dict[str, ProviderConfig] = Field(default_factory=dict)
    agent_models: dict[str, ModelConfig] = Field(default_factory=dict)
    analysis: AnalysisOptions = Field(default_factory=AnalysisOptions)
    environment: EnvironmentConfig = Field(default_factory=EnvironmentConfig)

    @field_validator("providers")
    @classmethod
    def validate_providers(cls, value: dict[str, ProviderConfig]) -> dict[str, ProviderConfig]:
        normalized = {key.lower(): config for key, config in value.items()}
        invalid = [key for key in normalized if key not in SUPPORTED_PROVIDERS]
        if invalid:
            raise ValueError(f"Unsupported providers: {', '.join(invalid)}")
        return normalized
