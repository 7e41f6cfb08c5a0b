"""File-based persistence for solve run outputs."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..config import settings

logger = logging.getLogger(__name__)


class FileStorage:
    """Run directories under ``<data_root>/runs`` holding JSON and CSV artifacts."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = (root or settings.data_root).resolve()
        self.runs_root = self.root / "runs"
        self.runs_root.mkdir(parents=True, exist_ok=True)

    def make_run_directory(self, prefix: str = "solve") -> Path:
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        path = self.runs_root / f"{prefix}_{timestamp}"
        attempt = 1
        while path.exists():
            attempt += 1
            path = self.runs_root / f"{prefix}_{timestamp}_{attempt}"
        path.mkdir(parents=True, exist_ok=False)
        logger.debug("Created run directory %s", path)
        return path

    def write_json(self, path: Path, data: Any, *, indent: int = 2) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as handle:
            json.dump(data, handle, ensure_ascii=False, indent=indent)

    def write_csv(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(content)

    def list_runs(self, prefix: str | None = None) -> list[Path]:
        runs = [path for path in self.runs_root.iterdir() if path.is_dir()]
        if prefix is not None:
            runs = [path for path in runs if path.name.startswith(f"{prefix}_")]
        return sorted(runs)
