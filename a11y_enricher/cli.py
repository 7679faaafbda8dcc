"""Run an accessibility analysis against a live page.

Usage:
  a11y-enrich https://example.com [--settings settings.json] [--browser firefox] \
    [--headed] [--artifacts artifacts] [--no-links] [--no-buttons]

Without ``--settings`` the provider is read from LLM_PROVIDER and the matching
<PROVIDER>_API_KEY environment variable.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from selenium.common.exceptions import WebDriverException

from a11y_enricher.config.loader import SettingsStore, initialize_default_config, settings_from_environment
from a11y_enricher.core.analyzer import AccessibilityAnalyzer
from a11y_enricher.core.browser import BrowserSession
from a11y_enricher.core.exceptions import AnalysisError, GenerationError
from a11y_enricher.logging.artifacts import ArtifactManager
from a11y_enricher.logging.audit import EnrichmentAuditLogger

log = logging.getLogger("a11y_enricher")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="a11y-enrich", description=__doc__.splitlines()[0])
    parser.add_argument("url")
    parser.add_argument("--settings", help="JSON settings file (providers, agent models, analysis options)")
    parser.add_argument("--browser", choices=["chrome", "firefox"])
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    parser.add_argument("--artifacts", default="artifacts")
    parser.add_argument("--no-links", action="store_true")
    parser.add_argument("--no-buttons", action="store_true")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def load_store(settings_path: str | None) -> SettingsStore:
    if settings_path:
        store = SettingsStore.open(settings_path)
        initialize_default_config(store)
        return store
    return SettingsStore(settings_from_environment())


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        store = load_store(args.settings)
    except (AnalysisError, ValueError, OSError) as exc:
        log.error("Could not load settings: %s", exc)
        return 2

    settings = store.settings
    if args.no_links:
        settings.analysis.analyze_links = False
    if args.no_buttons:
        settings.analysis.analyze_buttons = False
    if args.headed:
        settings.environment.headless = False

    artifacts = ArtifactManager(args.artifacts)
    analyzer = AccessibilityAnalyzer(store, audit_logger=EnrichmentAuditLogger(args.artifacts))
    session = BrowserSession(settings.environment)
    try:
        driver = session.start(args.browser)
    except WebDriverException as exc:
        log.error("WebDriver could not start: %s", exc)
        return 2

    try:
        page = session.open(driver, args.url)
        report = analyzer.analyze(page, progress=lambda label: log.info("== %s", label))
        final_url = page.url
        artifacts.write_dom_snapshot(final_url, page.page_source())
        report_path = artifacts.write_report(final_url, report)
    except (AnalysisError, GenerationError) as exc:
        log.error("%s", exc)
        return 1
    finally:
        driver.quit()

    log.info("Report written to %s", report_path)
    json.dump(report.to_dict(), sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
