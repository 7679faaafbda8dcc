from __future__ import annotations

import logging

import pytest

from a11y_enricher.config.loader import SettingsStore
from a11y_enricher.config.schema import ModelConfig, ProviderConfig, Settings
from a11y_enricher.logging.artifacts import ArtifactManager


@pytest.fixture(autouse=True)
def quiet_provider_env(monkeypatch):
    for name in ("LLM_PROVIDER", "OPENAI_API_KEY", "ANTHROPIC_API_KEY", "GEMINI_API_KEY", "DEFAULT_OPENAI_KEY"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def settings_store():
    settings = Settings(
        providers={"openai": ProviderConfig(api_key="sk-test", model_names=["gpt-5-mini"])},
        agent_models={"navigator": ModelConfig(provider="openai", model_name="gpt-5-mini")},
    )
    return SettingsStore(settings)


@pytest.fixture()
def artifact_manager(tmp_path):
    return ArtifactManager(tmp_path / "artifacts")


@pytest.fixture()
def caplog_info(caplog):
    caplog.set_level(logging.INFO, logger="a11y_enricher")
    return caplog
