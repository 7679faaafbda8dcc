from __future__ import annotations

import json
import re
import shutil
from datetime import UTC, datetime
from pathlib import Path

from a11y_enricher.core.metadata import AnalysisReport


class ArtifactManager:
    """Creates and manages report and DOM snapshot files."""

    def __init__(self, root: str | Path = "artifacts") -> None:
        self.root = Path(root)
        self.report_root = self.root / "reports"
        self.dom_root = self.root / "dom_snapshots"
        self._ensure_structure()

    def _ensure_structure(self) -> None:
        self.report_root.mkdir(parents=True, exist_ok=True)
        self.dom_root.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def timestamp() -> str:
        return datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")

    @staticmethod
    def slug(url: str) -> str:
        stripped = re.sub(r"^[a-z]+://", "", url.lower())
        return re.sub(r"[^a-z0-9]+", "_", stripped).strip("_")[:60] or "page"

    def write_report(self, url: str, report: AnalysisReport, timestamp: str | None = None) -> Path:
        stamp = timestamp or self.timestamp()
        path = self.report_root / f"{stamp}_{self.slug(url)}.json"
        payload = {"url": url, "created_at": stamp, **report.to_dict()}
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return path

    def write_dom_snapshot(self, url: str, page_source: str, timestamp: str | None = None) -> Path:
        stamp = timestamp or self.timestamp()
        path = self.dom_root / f"{stamp}_{self.slug(url)}.html"
        path.write_text(page_source, encoding="utf-8")
        return path

    def reset(self) -> Path:
        self._ensure_structure()
        for child in self.root.iterdir():
            if child.is_file() and child.name != ".gitkeep":
                child.unlink()
        for directory in (self.report_root, self.dom_root):
            for child in directory.iterdir():
                if child.is_dir():
                    shutil.rmtree(child)
                elif child.name != ".gitkeep":
                    child.unlink()
        return self.root
