"""Run-level observability helpers for SpriteGuard.

Provides lightweight, in-process aggregation of forge outcomes that can
be surfaced in CLI output and exported as JSON after a run.
"""

from __future__ import annotations

import json
import threading
import time
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass
class ForgeMetricsCollector:
    """Collect counters for forge successes, rejections and failures.

    Safe to share between concurrent ``forge_sprite`` calls.
    """

    started_at_epoch: float = field(default_factory=time.time)
    finished_at_epoch: float | None = None

    _outcomes: Counter[str] = field(default_factory=Counter)
    _drift_scores: list[float] = field(default_factory=list)
    _last_failure: str | None = None
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def record_success(self, drift_score: float) -> None:
        """Record an accepted forge and its drift score."""
        with self._lock:
            self._outcomes["success"] += 1
            self._drift_scores.append(drift_score)

    def record_rejection(self, drift_score: float, reason: str) -> None:
        """Record a forge rejected by the integrity audit."""
        with self._lock:
            self._outcomes["identity_drift"] += 1
            self._drift_scores.append(drift_score)
            self._last_failure = reason

    def record_failure(self, error: BaseException) -> None:
        """Record a forge that failed for any other reason."""
        with self._lock:
            self._outcomes["error"] += 1
            self._last_failure = f"{type(error).__name__}: {error}"

    def finish(self) -> None:
        """Mark the run as finished."""
        with self._lock:
            if self.finished_at_epoch is None:
                self.finished_at_epoch = time.time()

    def snapshot(self) -> dict[str, Any]:
        """Build a JSON-serializable snapshot of collected metrics."""
        with self._lock:
            finished_at = self.finished_at_epoch
            end = finished_at if finished_at is not None else time.time()
            scores = list(self._drift_scores)
            return {
                "started_at_epoch": self.started_at_epoch,
                "finished_at_epoch": finished_at,
                "duration_seconds": max(0.0, end - self.started_at_epoch),
                "forges_total": sum(self._outcomes.values()),
                "outcomes": dict(self._outcomes),
                "mean_drift_score": sum(scores) / len(scores) if scores else None,
                "min_drift_score": min(scores) if scores else None,
                "last_failure": self._last_failure,
            }


def write_run_summary(path: Path, payload: dict[str, Any]) -> None:
    """Write a run summary payload to disk as UTF-8 JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, sort_keys=True) + "\n")
