"""Configuration management."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


@dataclass
class PathsConfig:
    """Path settings."""
    snapshot_path: Path = Path("data/latest.json")
    store_dir: Path = Path("filters")
    customers_path: Path = Path("customers.yaml")
    output_dir: Path = Path("exports")


@dataclass
class DefaultsConfig:
    """Filter defaults applied on first run."""
    sources: list[str] = field(default_factory=lambda: ["Microsoft", "EOS"])
    statuses: list[str] = field(default_factory=lambda: [
        "Planned",
        "Rolling out",
        "Try now",
        "Launched",
    ])
    horizon_months: int = 12
    history_months: int = 12


@dataclass
class SnapshotConfig:
    """Remote snapshot settings."""
    url: Optional[str] = None
    timeout: float = 30.0


@dataclass
class Settings:
    """Application settings."""

    # Config sections
    paths: PathsConfig = field(default_factory=PathsConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    snapshot: SnapshotConfig = field(default_factory=SnapshotConfig)

    @property
    def snapshot_path(self) -> Path:
        return self.paths.snapshot_path

    @property
    def store_dir(self) -> Path:
        return self.paths.store_dir

    @property
    def customers_path(self) -> Path:
        return self.paths.customers_path

    @property
    def output_dir(self) -> Path:
        return self.paths.output_dir

    @property
    def snapshot_url(self) -> Optional[str]:
        return self.snapshot.url


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_settings(config_path: Path = Path("config.yaml")) -> Settings:
    """Get application settings from YAML config and environment."""
    config = load_config(config_path)

    settings = Settings()

    if "paths" in config:
        for key, value in config["paths"].items():
            setattr(settings.paths, key, Path(value))

    if "defaults" in config:
        for key, value in config["defaults"].items():
            setattr(settings.defaults, key, value)

    if "snapshot" in config:
        for key, value in config["snapshot"].items():
            setattr(settings.snapshot, key, value)

    # Environment wins over the file
    snapshot_url = os.getenv("UPDATE_LENS_SNAPSHOT_URL")
    if snapshot_url:
        settings.snapshot.url = snapshot_url

    return settings
