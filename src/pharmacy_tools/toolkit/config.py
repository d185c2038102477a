"""
Toolkit Configuration

Configuration management for the pharmacy tools.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class DataConfig:
    """Dataset locations."""

    products_path: str | None = None  # None: bundled catalog
    fest_path: str | None = None
    pim_path: str | None = None
    interactions_path: str | None = None


@dataclass
class OMEQConfig:
    """OMEQ calculator configuration."""

    max_daily_units: float = 20
    round_digits: int = 2


@dataclass
class SearchConfig:
    """Medication search configuration."""

    max_results: int = 25
    min_full_query_length: int = 8


@dataclass
class InteractionsConfig:
    """Interaction lookup configuration."""

    autocomplete_limit: int = 12


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "WARNING"


@dataclass
class ToolkitConfig:
    """Complete toolkit configuration."""

    name: str = "pharmacy-tools"
    version: str = "0.1.0"

    data: DataConfig = field(default_factory=DataConfig)
    omeq: OMEQConfig = field(default_factory=OMEQConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    interactions: InteractionsConfig = field(default_factory=InteractionsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "ToolkitConfig":
        """Create config from dictionary."""
        config = cls()
        data = data or {}

        if "name" in data:
            config.name = data["name"]
        if "version" in data:
            config.version = data["version"]

        # Data config
        if "data" in data:
            d = data["data"] or {}
            config.data = DataConfig(
                products_path=d.get("products_path"),
                fest_path=d.get("fest_path"),
                pim_path=d.get("pim_path"),
                interactions_path=d.get("interactions_path"),
            )

        # OMEQ config
        if "omeq" in data:
            omeq = data["omeq"] or {}
            config.omeq = OMEQConfig(
                max_daily_units=omeq.get("max_daily_units", 20),
                round_digits=omeq.get("round_digits", 2),
            )

        # Search config
        if "search" in data:
            search = data["search"] or {}
            config.search = SearchConfig(
                max_results=search.get("max_results", 25),
                min_full_query_length=search.get("min_full_query_length", 8),
            )

        # Interactions config
        if "interactions" in data:
            inter = data["interactions"] or {}
            config.interactions = InteractionsConfig(
                autocomplete_limit=inter.get("autocomplete_limit", 12),
            )

        # Logging config
        if "logging" in data:
            log = data["logging"] or {}
            level = str(log.get("level", "WARNING")).upper()
            if level not in LOG_LEVELS:
                raise ValueError(f"Unknown logging level: {level} (expected one of {', '.join(LOG_LEVELS)})")
            config.logging = LoggingConfig(level=level)

        return config

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "name": self.name,
            "version": self.version,
            "data": {
                "products_path": self.data.products_path,
                "fest_path": self.data.fest_path,
                "pim_path": self.data.pim_path,
                "interactions_path": self.data.interactions_path,
            },
            "omeq": {
                "max_daily_units": self.omeq.max_daily_units,
                "round_digits": self.omeq.round_digits,
            },
            "search": {
                "max_results": self.search.max_results,
                "min_full_query_length": self.search.min_full_query_length,
            },
            "interactions": {
                "autocomplete_limit": self.interactions.autocomplete_limit,
            },
            "logging": {
                "level": self.logging.level,
            },
        }


def load_config(config_path: str | Path) -> ToolkitConfig:
    """Load configuration from YAML file."""
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    return ToolkitConfig.from_dict(data)
