"""YAML config loader — reads catcircle.yml into AppConfig."""

from pathlib import Path

import yaml

from catcircle.schemas.config import AppConfig

DEFAULT_CONFIG_PATH = Path("catcircle.yml")


def load_config(path: str | Path) -> AppConfig:
    """Load and validate a config file.

    Raises ``FileNotFoundError`` if the path doesn't exist and
    ``pydantic.ValidationError`` if the YAML content is invalid.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    raw = yaml.safe_load(path.read_text())
    # An empty file (or one with only comments) loads as None.
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config file must be a YAML mapping, got {type(raw).__name__}")

    # Sections left blank in YAML (``matching:`` with nothing under it) load as None.
    for key in ("api", "matching", "assistant", "payment", "rewards"):
        if key in raw and raw[key] is None:
            del raw[key]

    return AppConfig(**raw)


def load_config_or_default(path: str | Path | None) -> AppConfig:
    """Load ``path`` if given; otherwise use ./catcircle.yml when present, else defaults."""
    if path is not None:
        return load_config(path)
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return AppConfig()
