from __future__ import annotations

import json
import threading
from dataclasses import asdict
from pathlib import Path

from a11y_enricher.core.metadata import EnrichmentAttempt


class EnrichmentAuditLogger:
    """Appends one JSON line per enrichment attempt."""

    def __init__(self, root: str | Path = "artifacts") -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self.attempts_path = self.root / "enrichment_attempts.jsonl"
        self._lock = threading.Lock()

    def write(self, attempt: EnrichmentAttempt) -> None:
        payload = asdict(attempt)
        payload["source"] = attempt.source[:80]
        payload["error"] = attempt.error[:200]
        with self._lock, self.attempts_path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(payload) + "\n")

    def read_attempts(self) -> list[dict]:
        if not self.attempts_path.exists():
            return []
        with self.attempts_path.open("r", encoding="utf-8") as handle:
            return [json.loads(line) for line in handle if line.strip()]
