"""
Configuration loader — reads confdoc.yml into a BuildConfig.

The file is optional.  Without it, confdoc scans the current directory
and resolves relative targets against it.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from confdoc.core.errors import ConfdocError

logger = logging.getLogger(__name__)

# Default config filename
CONFIG_FILE = "confdoc.yml"

# Directories never scanned for declarations
DEFAULT_EXCLUDES = (".git", ".venv", "venv", "__pycache__", "node_modules", "build", "dist")


class ConfigError(ConfdocError):
    """Raised when confdoc configuration is invalid or missing."""


class BuildConfig(BaseModel):
    """Settings for one build.

    ``root`` is the directory holding confdoc.yml; sources and relative
    generation targets resolve against it.
    """

    sources: list[str] = Field(default_factory=lambda: ["."])
    exclude: list[str] = Field(default_factory=list)
    root: Path = Field(default_factory=Path.cwd)

    def source_paths(self) -> list[Path]:
        """Configured sources as absolute paths."""
        return [(self.root / s).resolve() for s in self.sources]


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for confdoc.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to confdoc.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path | None = None) -> BuildConfig:
    """Load and validate build configuration.

    Args:
        path: Explicit path to confdoc.yml. If None, searches upward and
            falls back to defaults rooted at the current directory.

    Returns:
        Validated BuildConfig.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    if path is None:
        path = find_config_file()
        if path is None:
            logger.debug("No %s found, using defaults", CONFIG_FILE)
            return BuildConfig()
    elif not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading confdoc config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The YAML may wrap everything under a "confdoc" key or be flat
    if "confdoc" in data and isinstance(data["confdoc"], dict):
        data = data["confdoc"]

    data = {**data, "root": path.parent.resolve()}

    try:
        config = BuildConfig.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid confdoc configuration: {e}") from e

    logger.info("Loaded config from %s (%d source(s))", path, len(config.sources))
    return config
