"""JSON configuration — engine settings and cut manifests."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from keycut.timeparse import EPSILON_DIVISOR


@dataclass
class EngineConfig:
    """Tunables shared by every run."""

    # Keyframe tolerance is one frame divided by this
    epsilon_divisor: int = EPSILON_DIVISOR
    work_dir: Path | None = None
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if isinstance(self.epsilon_divisor, bool) or not isinstance(self.epsilon_divisor, int):
            raise ValueError("epsilon_divisor must be an integer")
        if self.epsilon_divisor <= 0:
            raise ValueError("epsilon_divisor must be positive")
        if not isinstance(logging.getLevelName(str(self.log_level).upper()), int):
            raise ValueError(f"Unknown log_level {self.log_level!r}")
        if self.work_dir is not None:
            self.work_dir = Path(self.work_dir)


@dataclass
class CutManifest:
    """A single cut request: which file, which range, where to write it."""

    input: Path
    output: Path
    start: str
    end: str
    version: str = "1"
    engine: EngineConfig = field(default_factory=EngineConfig)


def _engine_from_dict(data: dict) -> EngineConfig:
    unknown = set(data) - {"epsilon_divisor", "work_dir", "log_level"}
    if unknown:
        raise ValueError(f"Unknown engine settings: {', '.join(sorted(unknown))}")
    return EngineConfig(**data)


def load_config(path: str | Path) -> EngineConfig:
    """Load engine settings from a JSON file."""
    path = Path(path)
    data = json.loads(path.read_text())
    if not isinstance(data, dict):
        raise ValueError("Config must be a JSON object")
    return _engine_from_dict(data)


def load_manifest(path: str | Path) -> CutManifest:
    """Load and validate a cut manifest from a JSON file."""
    path = Path(path)
    data = json.loads(path.read_text())

    required = ("input", "output", "start", "end")
    if not isinstance(data, dict) or any(k not in data for k in required):
        raise ValueError("Manifest must contain 'input', 'output', 'start' and 'end' fields")

    engine = _engine_from_dict(data["engine"]) if "engine" in data else EngineConfig()

    return CutManifest(
        version=data.get("version", "1"),
        input=Path(data["input"]),
        output=Path(data["output"]),
        start=str(data["start"]),
        end=str(data["end"]),
        engine=engine,
    )
