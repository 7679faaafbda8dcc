from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from a11y_enricher import cli as cli_module
from a11y_enricher.cli import build_parser, load_store
from a11y_enricher.config.loader import (
    ConfigLoader,
    SettingsStore,
    initialize_default_config,
    resolve_generation_config,
    settings_from_environment,
)
from a11y_enricher.config.schema import ModelConfig, ProviderConfig
from a11y_enricher.core.browser import PageContext
from a11y_enricher.core.exceptions import ConfigurationError, GenerationError
from a11y_enricher.core.metadata import AnalysisReport, EnrichmentAttempt, ImageAnalysis
from a11y_enricher.llm.client import GeminiChatClient, create_chat_client
from a11y_enricher.llm.parser import clean_generated_text, is_fetch_rejected
from a11y_enricher.logging.audit import EnrichmentAuditLogger


def test_config_loader_validates_json(tmp_path):
    config_path = tmp_path / "settings.json"
    config_path.write_text(
        json.dumps(
            {
                "providers": {"OpenAI": {"api_key": "sk-1", "model_names": ["gpt-5-mini"]}},
                "agent_models": {"navigator": {"provider": "openai", "model_name": "gpt-5-mini"}},
                "analysis": {"image_limit": 3, "reverse_before_enrichment": False},
                "environment": {"browser": "Firefox", "headless": True},
            }
        ),
        encoding="utf-8",
    )
    settings = ConfigLoader.load(config_path)
    assert settings.providers["openai"].api_key == "sk-1"
    assert settings.analysis.image_limit == 3
    assert settings.analysis.reverse_before_enrichment is False
    assert settings.environment.browser == "firefox"


def test_config_loader_rejects_unknown_provider(tmp_path):
    config_path = tmp_path / "settings.json"
    config_path.write_text(
        json.dumps({"agent_models": {"navigator": {"provider": "mystery", "model_name": "x"}}}),
        encoding="utf-8",
    )
    with pytest.raises(ValidationError):
        ConfigLoader.load(config_path)


def test_settings_store_persists_and_reopens(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    store = SettingsStore.open(path)
    assert not store.has_provider("openai")
    store.set_provider("openai", ProviderConfig(api_key="sk-2"))
    store.set_agent_model("navigator", ModelConfig(provider="openai", model_name="gpt-4o-mini"))

    reopened = SettingsStore.open(path)
    assert reopened.get_provider("OpenAI").api_key == "sk-2"
    assert reopened.get_agent_model("navigator").model_name == "gpt-4o-mini"


def test_initialize_default_config_seeds_openai(monkeypatch, tmp_path):
    monkeypatch.setenv("DEFAULT_OPENAI_KEY", "sk-default")
    store = SettingsStore.open(tmp_path / "settings.json")
    assert initialize_default_config(store) is True
    assert store.get_provider("openai").model_names == ["gpt-5-mini"]
    assert store.get_agent_model("navigator").model_name == "gpt-5-mini"
    assert store.get_agent_model("planner").provider == "openai"
    # A stored provider is never overwritten.
    assert initialize_default_config(store) is False


def test_initialize_default_config_without_key_is_noop(tmp_path):
    store = SettingsStore.open(tmp_path / "settings.json")
    assert initialize_default_config(store) is False
    assert not (tmp_path / "settings.json").exists()


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", "gemini")
    monkeypatch.setenv("GEMINI_API_KEY", "g-key")
    settings = settings_from_environment()
    provider_config, model_config = resolve_generation_config(SettingsStore(settings))
    assert provider_config.api_key == "g-key"
    assert model_config.model_name == "gemini-2.5-flash"


def test_resolve_generation_config_requires_model_and_key():
    store = SettingsStore()
    with pytest.raises(ConfigurationError, match="model configuration not found"):
        resolve_generation_config(store)

    store.set_agent_model("navigator", ModelConfig(provider="openai", model_name="gpt-5-mini"))
    with pytest.raises(ConfigurationError, match="API key not configured"):
        resolve_generation_config(store)


def test_chat_client_factory_supports_gemini():
    client = create_chat_client(
        ProviderConfig(api_key="test-key"),
        ModelConfig(provider="gemini", model_name="gemini-2.5-flash"),
    )
    assert isinstance(client, GeminiChatClient)
    assert client.provider_name == "gemini"


def test_fetch_rejected_prefers_structured_codes():
    assert is_fetch_rejected(GenerationError("bad", status=400, code="invalid_image_url"))
    assert not is_fetch_rejected(GenerationError("rate limited with 400 tokens", status=429, code="rate_limit"))
    assert is_fetch_rejected(RuntimeError("400 Error while downloading https://x/a.jpg"))
    assert is_fetch_rejected(RuntimeError("BadRequestError: could not process"))
    assert not is_fetch_rejected(TimeoutError("read timed out"))


def test_clean_generated_text_strips_wrapping_quotes():
    assert clean_generated_text('  "A red  bicycle."\n') == "A red bicycle."
    assert clean_generated_text("") == ""


def test_report_artifacts_are_written_and_reset(artifact_manager):
    report = AnalysisReport(
        page_summary="A page about bicycles.",
        image_analysis=[ImageAnalysis("https://x/a.jpg", "", "main > img", "A red bicycle.")],
    )
    path = artifact_manager.write_report("https://Example.com/Blog?id=7", report, timestamp="20260101T000000Z")

    assert path.name == "20260101T000000Z_example_com_blog_id_7.json"
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["url"] == "https://Example.com/Blog?id=7"
    assert payload["image_analysis"][0]["generated_alt"] == "A red bicycle."
    assert "link_analysis" not in payload

    snapshot = artifact_manager.write_dom_snapshot("https://example.com", "<html></html>")
    assert snapshot.exists()
    artifact_manager.reset()
    assert list(artifact_manager.report_root.iterdir()) == []
    assert list(artifact_manager.dom_root.iterdir()) == []


def test_audit_logger_truncates_long_fields(tmp_path):
    audit = EnrichmentAuditLogger(tmp_path)
    audit.write(EnrichmentAttempt("image", "data:" + "A" * 500, "main > img", "direct", False, "E" * 500))
    [attempt] = audit.read_attempts()
    assert len(attempt["source"]) == 80
    assert len(attempt["error"]) == 200


def test_cli_store_falls_back_to_environment(monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", "anthropic")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "a-key")
    store = load_store(None)
    provider_config, model_config = resolve_generation_config(store)
    assert provider_config.api_key == "a-key"
    assert model_config.provider == "anthropic"


def test_cli_store_seeds_settings_file(monkeypatch, tmp_path):
    monkeypatch.setenv("DEFAULT_OPENAI_KEY", "sk-default")
    settings_path = tmp_path / "settings.json"
    store = load_store(str(settings_path))
    assert store.get_agent_model("navigator").model_name == "gpt-5-mini"
    assert json.loads(settings_path.read_text(encoding="utf-8"))["providers"]["openai"]["api_key"] == "sk-default"


def test_cli_flags():
    args = build_parser().parse_args(["https://example.com", "--browser", "firefox", "--no-links", "-v"])
    assert args.browser == "firefox"
    assert args.no_links and not args.no_buttons
    assert args.verbose


class RedirectedDriver:
    current_url = "https://example.com/landing"
    page_source = "<html><body>Landing</body></html>"

    def __init__(self) -> None:
        self.quit_called = False

    def quit(self) -> None:
        self.quit_called = True


class RedirectingSession:
    driver = RedirectedDriver()

    def __init__(self, environment) -> None:
        self.environment = environment

    def start(self, browser_name=None):
        return self.driver

    def open(self, driver, url):
        return PageContext(driver)


class CannedAnalyzer:
    def __init__(self, store, **kwargs) -> None:
        self.store = store

    def analyze(self, page, progress=None):
        progress("Assembling report")
        return AnalysisReport(page_summary="A landing page.")


def test_cli_names_artifacts_after_the_final_page_url(monkeypatch, tmp_path, capsys):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setattr(cli_module, "BrowserSession", RedirectingSession)
    monkeypatch.setattr(cli_module, "AccessibilityAnalyzer", CannedAnalyzer)

    exit_code = cli_module.main(["https://example.com/old", "--artifacts", str(tmp_path)])

    assert exit_code == 0
    assert RedirectingSession.driver.quit_called
    [report_path] = (tmp_path / "reports").iterdir()
    [snapshot_path] = (tmp_path / "dom_snapshots").iterdir()
    assert report_path.name.endswith("_example_com_landing.json")
    assert snapshot_path.read_text(encoding="utf-8") == RedirectedDriver.page_source
    assert json.loads(report_path.read_text(encoding="utf-8"))["url"] == "https://example.com/landing"
    assert json.loads(capsys.readouterr().out)["page_summary"] == "A landing page."
