"""
Profile configuration — where the gists live and how to reach them.

Loaded from ``<profile root>/profilekit.yaml`` and overridden by
environment variables. The file is machine-local and never synced;
credentials are only ever read from the environment.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel

logger = logging.getLogger("profilekit.config")

CONFIG_FILENAME = "profilekit.yaml"
DEFAULT_ENTRY_FILE = "Microsoft.PowerShell_profile.ps1"
FALLBACK_TOKEN_ENV_VAR = "GITHUB_TOKEN"

ENV_OVERRIDES = {
    "PROFILEKIT_MACHINE": "machine_id",
    "PROFILEKIT_PUBLIC_GIST": "public_gist_id",
    "PROFILEKIT_PRIVATE_GIST": "private_gist_id",
}


class ProfileConfig(BaseModel):
    """Settings for a profile root.

    Attributes:
        entry_file: On-disk name of the profile entry script.
        public_gist_id: Gist holding the public profile files.
        private_gist_id: Gist holding private-modules files, if any.
        token_env_var: Environment variable holding the bearer token.
        machine_id: Explicit machine identity override.
        api_url: Base URL of the gist API.
        timeout: Seconds before any HTTP request is abandoned.
    """

    entry_file: str = DEFAULT_ENTRY_FILE
    public_gist_id: Optional[str] = None
    private_gist_id: Optional[str] = None
    token_env_var: str = "PROFILEKIT_GIST_TOKEN"
    machine_id: Optional[str] = None
    api_url: str = "https://api.github.com"
    timeout: float = 30.0

    def resolve_token(self) -> Optional[str]:
        """Return the bearer credential from the environment, if set."""
        token = os.environ.get(self.token_env_var, "").strip()
        if not token:
            token = os.environ.get(FALLBACK_TOKEN_ENV_VAR, "").strip()
        return token or None


def _apply_env_overrides(data: dict) -> dict:
    for env_var, field in ENV_OVERRIDES.items():
        value = os.environ.get(env_var, "").strip()
        if value:
            data[field] = value
    return data


def load_config(home: Path, apply_env: bool = True) -> ProfileConfig:
    """Load the profile configuration for a profile root.

    Args:
        home: Profile root directory.
        apply_env: Layer environment overrides on top of the file.

    Returns:
        ProfileConfig from profilekit.yaml plus environment overrides,
        or defaults if the file is missing or invalid.
    """
    data: dict = {}
    config_file = home / CONFIG_FILENAME
    if config_file.exists():
        try:
            loaded = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
            if not isinstance(loaded, dict):
                raise ValueError("top-level value must be a mapping")
            data = loaded
        except (yaml.YAMLError, ValueError, OSError) as exc:
            logger.warning("Failed to load %s: %s — using defaults", config_file, exc)

    if apply_env:
        data = _apply_env_overrides(dict(data))
    try:
        return ProfileConfig(**data)
    except ValueError as exc:
        logger.warning("Invalid profile config: %s — using defaults", exc)
        return ProfileConfig(**(_apply_env_overrides({}) if apply_env else {}))


def save_config(home: Path, config: ProfileConfig) -> Path:
    """Persist configuration to profilekit.yaml.

    Args:
        home: Profile root directory.
        config: Configuration to write.

    Returns:
        Path: The written config file.
    """
    home.mkdir(parents=True, exist_ok=True)
    config_file = home / CONFIG_FILENAME
    data = config.model_dump(mode="json", exclude_none=True)
    config_file.write_text(yaml.dump(data, default_flow_style=False), encoding="utf-8")
    return config_file
