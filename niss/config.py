"""
Configuration for the NISS engine.
Weights and credibility tables are injected at construction and never mutated.
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple
import math
import os

from dotenv import load_dotenv

from niss.exceptions import ConfigurationError
from niss.scoring_config import (
    COMPONENT_NAMES,
    COMPONENT_WEIGHTS,
    DEFAULT_CREDIBILITY,
    ENGINE_VERSION,
    REGIME_BOUNDS,
    SCORE_BOUNDS,
    SOURCE_CREDIBILITY,
)

# Load .env early for EngineConfig.from_env
load_dotenv()

# camelCase component name -> environment suffix
_ENV_WEIGHT_KEYS: Dict[str, str] = {
    "priceAction": "PRICE_ACTION",
    "newsImpact": "NEWS_IMPACT",
    "technicalMomentum": "TECHNICAL_MOMENTUM",
    "optionsFlow": "OPTIONS_FLOW",
    "relativeStrength": "RELATIVE_STRENGTH",
    "volumeAnalysis": "VOLUME_ANALYSIS",
}


def _freeze(mapping: Mapping[str, float]) -> Mapping[str, float]:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class EngineConfig:
    """Read-only configuration for a NISSEngine instance."""

    version: str = ENGINE_VERSION
    component_weights: Mapping[str, float] = field(default_factory=lambda: _freeze(COMPONENT_WEIGHTS))
    source_credibility: Mapping[str, float] = field(default_factory=lambda: _freeze(SOURCE_CREDIBILITY))
    default_credibility: float = DEFAULT_CREDIBILITY
    regime_bounds: Tuple[float, float] = REGIME_BOUNDS
    score_bounds: Tuple[float, float] = SCORE_BOUNDS

    def __post_init__(self):
        # Re-wrap so callers passing plain dicts cannot mutate us afterwards
        object.__setattr__(self, "component_weights", _freeze(self.component_weights))
        object.__setattr__(self, "source_credibility", _freeze(self.source_credibility))
        self.validate()

    def validate(self) -> None:
        """Raise ConfigurationError on unusable weights or bounds."""
        names = set(self.component_weights)
        unknown = names - set(COMPONENT_NAMES)
        if unknown:
            raise ConfigurationError("component_weights", f"unknown components {sorted(unknown)}")
        missing = set(COMPONENT_NAMES) - names
        if missing:
            raise ConfigurationError("component_weights", f"missing components {sorted(missing)}")

        for name, weight in self.component_weights.items():
            if not isinstance(weight, (int, float)) or not math.isfinite(weight) or weight < 0:
                raise ConfigurationError(f"component_weights.{name}", f"invalid weight {weight!r}")

        total = sum(self.component_weights.values())
        if abs(total - 1.0) > 1e-6:
            raise ConfigurationError("component_weights", f"weights must sum to 1.0, got {total:.6f}")

        for source, multiplier in self.source_credibility.items():
            if not isinstance(multiplier, (int, float)) or multiplier <= 0:
                raise ConfigurationError(f"source_credibility.{source}", f"invalid multiplier {multiplier!r}")
        if self.default_credibility <= 0:
            raise ConfigurationError("default_credibility", "must be positive")

        for setting, (low, high) in (("regime_bounds", self.regime_bounds), ("score_bounds", self.score_bounds)):
            if low >= high:
                raise ConfigurationError(setting, f"lower bound {low} must be below upper bound {high}")

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Build a config applying NISS_WEIGHT_<COMPONENT> overrides from the environment."""
        weights = dict(COMPONENT_WEIGHTS)
        for name, suffix in _ENV_WEIGHT_KEYS.items():
            key = f"NISS_WEIGHT_{suffix}"
            raw = os.getenv(key)
            if raw is None or raw.strip() == "":
                continue
            try:
                weights[name] = float(raw)
            except ValueError:
                raise ConfigurationError(key, f"not a number: {raw!r}")
        return cls(component_weights=weights)

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "version": self.version,
            "component_weights": dict(self.component_weights),
            "source_credibility": dict(self.source_credibility),
            "default_credibility": self.default_credibility,
            "regime_bounds": list(self.regime_bounds),
            "score_bounds": list(self.score_bounds),
        }


# Global config instance
_config: Optional[EngineConfig] = None


def get_config() -> EngineConfig:
    """Get global config instance."""
    global _config
    if _config is None:
        _config = EngineConfig.from_env()
    return _config


def reset_config() -> None:
    """Drop the cached global config (picked up again on next get_config)."""
    global _config
    _config = None
