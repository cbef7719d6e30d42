"""
Configuration loader — reads hostprov.yml and builds the RunConfig.

The settings file is optional: without one, the defaults reproduce
the stock exo host install. ``build_run_config`` is the only place
that turns ambient process state (home directory, user name) into
values; everything downstream receives the resulting RunConfig.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from hostprov.core.errors import SettingsError
from hostprov.core.models.config import RunConfig, Settings

logger = logging.getLogger(__name__)

# Default settings filename
SETTINGS_FILE = "hostprov.yml"


def find_settings_file(start_dir: Path | None = None) -> Path | None:
    """Return ``hostprov.yml`` in the given directory (default: cwd), if present."""
    candidate = (start_dir or Path.cwd()) / SETTINGS_FILE
    return candidate if candidate.is_file() else None


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate provisioning settings.

    Args:
        path: Explicit settings path. If None, looks in the current
            directory and falls back to defaults when nothing is found.

    Returns:
        Validated Settings model.

    Raises:
        SettingsError: If an explicit file is missing, or any file is invalid.
    """
    if path is None:
        path = find_settings_file()
        if path is None:
            logger.debug("No %s found — using defaults", SETTINGS_FILE)
            return Settings()

    if not path.is_file():
        raise SettingsError(f"Settings file not found: {path}")

    logger.debug("Loading settings from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SettingsError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise SettingsError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return Settings()
    if not isinstance(data, dict):
        raise SettingsError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings in {path}: {e}") from e


def build_run_config(
    settings: Settings,
    *,
    home: Path,
    user: str,
    remote_source: str | None = None,
) -> RunConfig:
    """Resolve settings against the invoking user into an immutable RunConfig."""
    workspace_raw = settings.workspace_dir
    if workspace_raw.startswith("~"):
        workspace = home / workspace_raw[1:].lstrip("/")
    else:
        workspace = Path(workspace_raw)

    config = RunConfig(
        home=home,
        user=user,
        workspace=workspace,
        repository=settings.repository,
        checkout_dir=workspace / settings.checkout_name,
        version_pin=settings.runtime_version,
        remote_source=(remote_source or "").strip(),
        settings=settings,
    )
    logger.debug(
        "Run config: workspace=%s transfer_requested=%s",
        config.workspace,
        config.transfer_requested,
    )
    return config
