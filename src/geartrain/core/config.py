"""Configuration management with pydantic and YAML support."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field


class NetworkConfig(BaseModel):
    """Gear network behaviour."""

    check_rtol: float = Field(default=1e-9, ge=0.0, le=1e-2)
    check_atol: float = Field(default=1e-12, ge=0.0, le=1e-2)
    # Run the invariant check after every mutation and log violations.
    verify_after_mutation: bool = False


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: Literal["DEBUG", "INFO", "WARN", "ERROR"] = "WARN"


class GeartrainConfig(BaseModel):
    """Root configuration object."""

    network: NetworkConfig = Field(default_factory=NetworkConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(path: str | Path) -> GeartrainConfig:
    """Load configuration from YAML file.

    Args:
        path: Path to YAML config file.

    Returns:
        Parsed GeartrainConfig object.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    return GeartrainConfig.model_validate(data or {})


def save_config(config: GeartrainConfig, path: str | Path) -> None:
    """Save configuration to YAML file.

    Args:
        config: Configuration to save.
        path: Output path.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.safe_dump(config.model_dump(), f, default_flow_style=False)


def default_config() -> GeartrainConfig:
    """Return default configuration."""
    return GeartrainConfig()


def merge_config(base: GeartrainConfig, overrides: dict[str, Any]) -> GeartrainConfig:
    """Merge overrides into base configuration.

    Args:
        base: Base configuration.
        overrides: Dictionary of override values.

    Returns:
        New configuration with overrides applied.
    """
    base_dict = base.model_dump()

    def deep_merge(d1: dict, d2: dict) -> dict:
        result = d1.copy()
        for k, v in d2.items():
            if k in result and isinstance(result[k], dict) and isinstance(v, dict):
                result[k] = deep_merge(result[k], v)
            else:
                result[k] = v
        return result

    merged = deep_merge(base_dict, overrides)
    return GeartrainConfig.model_validate(merged)
