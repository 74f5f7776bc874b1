"""Configuration for the evolution engine."""
from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional


@dataclass
class EngineConfig:
    """Run-level settings of an :class:`~evolution.engine.EvolutionEngine`."""

    population_size: int = 20
    max_workers: int = 1
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.population_size < 1:
            raise ValueError("population_size must be at least 1.")
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1.")

    @classmethod
    def from_dict(cls, section: Optional[Dict[str, Any]]) -> "EngineConfig":
        """Builds a config from the ``engine`` section, ignoring unknown keys."""
        section = section or {}
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in section.items() if k in known})
