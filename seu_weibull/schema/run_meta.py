"""Run metadata schema with JSON serialization."""

from __future__ import annotations

import json
import os
import platform
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from importlib import metadata
from pathlib import Path
from typing import Any, Dict, Optional


@dataclass
class ReproducibilityContext:
    seed: int
    library_versions: Dict[str, str]
    system_info: Dict[str, Any]


@dataclass
class RunMeta:
    run_id: str
    started_at: str
    config: Dict[str, Any]
    data_fingerprint: Optional[str] = None
    reproducibility: Optional[ReproducibilityContext] = None

    def to_json(self) -> str:
        return json.dumps(asdict(self), indent=2)

    def write_atomic(self, path: Path) -> None:
        """Write run_meta to a temporary file then move for atomicity."""
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        tmp_path.write_text(self.to_json())
        tmp_path.replace(path)

    @classmethod
    def from_json(cls, raw: str) -> "RunMeta":
        data = json.loads(raw)
        repro = data.get("reproducibility")
        if repro is not None:
            data["reproducibility"] = ReproducibilityContext(**repro)
        return cls(**data)

    @classmethod
    def capture_context(
        cls,
        run_id: str,
        config: Dict[str, Any],
        seed: int,
        data_fingerprint: Optional[str] = None,
    ) -> "RunMeta":
        reproducibility = ReproducibilityContext(
            seed=seed,
            library_versions=_capture_lib_versions(),
            system_info={
                "os": platform.platform(),
                "cpu_count": os.cpu_count(),
                "python_version": platform.python_version(),
            },
        )
        return cls(
            run_id=run_id,
            started_at=datetime.now(timezone.utc).isoformat(),
            config=config,
            data_fingerprint=data_fingerprint,
            reproducibility=reproducibility,
        )


def _capture_lib_versions() -> Dict[str, str]:
    versions: Dict[str, str] = {}
    for lib in ["numpy", "scipy", "pandas", "typer"]:
        try:
            versions[lib] = metadata.version(lib)
        except metadata.PackageNotFoundError:
            versions[lib] = "missing"
    return versions


__all__ = ["ReproducibilityContext", "RunMeta"]
