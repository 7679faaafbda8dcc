from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from a11y_enricher.config.schema import (
    NAVIGATOR_AGENT,
    PLANNER_AGENT,
    SUPPORTED_PROVIDERS,
    ModelConfig,
    ProviderConfig,
    Settings,
)
from a11y_enricher.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_OPENAI_MODEL = "gpt-5-mini"
DEFAULT_MODELS = {
    "openai": DEFAULT_OPENAI_MODEL,
    "anthropic": "claude-3-5-sonnet-latest",
    "gemini": "gemini-2.5-flash",
}


class ConfigLoader:
    """Loads and validates the JSON settings file."""

    @staticmethod
    def load(path: str | Path) -> Settings:
        config_path = Path(path)
        with config_path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        return Settings.model_validate(payload)


class SettingsStore:
    """Provider and agent-model settings, optionally backed by a JSON file."""

    def __init__(self, settings: Settings | None = None, path: str | Path | None = None) -> None:
        self.settings = settings or Settings()
        self.path = Path(path) if path else None

    @classmethod
    def open(cls, path: str | Path) -> "SettingsStore":
        settings_path = Path(path)
        if settings_path.exists():
            return cls(ConfigLoader.load(settings_path), settings_path)
        return cls(Settings(), settings_path)

    def get_provider(self, provider: str) -> ProviderConfig | None:
        return self.settings.providers.get(provider.lower())

    def has_provider(self, provider: str) -> bool:
        return provider.lower() in self.settings.providers

    def set_provider(self, provider: str, config: ProviderConfig) -> None:
        self.settings.providers[provider.lower()] = config
        self.save()

    def get_agent_model(self, agent_name: str) -> ModelConfig | None:
        return self.settings.agent_models.get(agent_name)

    def set_agent_model(self, agent_name: str, config: ModelConfig) -> None:
        self.settings.agent_models[agent_name] = config
        self.save()

    def save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(self.settings.model_dump(mode="json"), indent=2, sort_keys=True),
            encoding="utf-8",
        )


def settings_from_environment() -> Settings:
    """Builds settings from LLM_PROVIDER and the matching <PROVIDER>_API_KEY."""

    provider = os.getenv("LLM_PROVIDER", "openai").lower()
    if provider not in SUPPORTED_PROVIDERS:
        raise ConfigurationError(f"Unsupported LLM provider: {provider}")
    settings = Settings()
    api_key = os.getenv(f"{provider.upper()}_API_KEY", "")
    model_name = os.getenv(f"{provider.upper()}_MODEL", DEFAULT_MODELS[provider])
    if api_key:
        settings.providers[provider] = ProviderConfig(api_key=api_key, model_names=[model_name])
    settings.agent_models[NAVIGATOR_AGENT] = ModelConfig(provider=provider, model_name=model_name)
    return settings


def initialize_default_config(store: SettingsStore) -> bool:
    """Seeds an OpenAI provider from DEFAULT_OPENAI_KEY when none is stored.

    Returns True when defaults were written. Failures are logged and never raised.
    """

    default_key = os.getenv("DEFAULT_OPENAI_KEY", "").strip()
    if not default_key:
        logger.info("No DEFAULT_OPENAI_KEY found in environment, skipping preset")
        return False
    try:
        if store.has_provider("openai"):
            logger.info("OpenAI provider already configured, skipping preset")
            return False
        store.set_provider(
            "openai",
            ProviderConfig(api_key=default_key, model_names=[DEFAULT_OPENAI_MODEL]),
        )
        for agent_name in (NAVIGATOR_AGENT, PLANNER_AGENT):
            store.set_agent_model(
                agent_name,
                ModelConfig(provider="openai", model_name=DEFAULT_OPENAI_MODEL),
            )
    except (OSError, ValueError) as exc:
        logger.error("Failed to initialize default config: %s", exc)
        return False
    logger.info("Default configuration completed with %s", DEFAULT_OPENAI_MODEL)
    return True


def resolve_generation_config(
    store: SettingsStore,
    agent_name: str = NAVIGATOR_AGENT,
) -> tuple[ProviderConfig, ModelConfig]:
    model_config = store.get_agent_model(agent_name)
    if model_config is None:
        raise ConfigurationError(f"{agent_name.capitalize()} model configuration not found")
    provider_config = store.get_provider(model_config.provider)
    if provider_config is None or not provider_config.api_key:
        raise ConfigurationError(f"{model_config.provider} API key not configured")
    return provider_config, model_config
