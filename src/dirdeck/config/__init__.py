"""Configuration management for Dirdeck.

Settings live in ``~/.dirdeck/config.yaml`` and are layered with
``DIRDECK__SECTION__KEY`` environment variables and per-invocation CLI
overrides; see :func:`resolve_with_precedence` for the order.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Sequence

import yaml

from .exceptions import ConfigError
from .models import DirdeckConfig
from .resolver import assign_path, flatten_for_env, overrides_from_env, resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.dirdeck/config.yaml")
HEADER_LINES = (
    "# Dirdeck configuration file",
    "# Generated automatically; manage via `dirdeck config edit` or `dirdeck config set`.",
)
STAMP_PREFIX = "# Last updated:"


class ConfigManager:
    """Read, validate, and persist the Dirdeck configuration file.

    Attributes:
        config_path: Resolved location of the YAML file.
    """

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = os.environ if env is None else env

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> DirdeckConfig:
        """Return the effective configuration.

        Args:
            cli_overrides: Dotted-key overrides with the highest precedence.
            include_env: Whether ``DIRDECK__`` variables participate.
            ensure_file: Create the default file first when it is missing.
            env_overrides: Environment mapping to use instead of the process environment.

        Raises:
            ConfigError: If the file is unreadable or any layer fails validation.
        """
        if ensure_file:
            self.ensure_exists()
        env_layer = None
        if include_env:
            env_layer = overrides_from_env(self._env if env_overrides is None else env_overrides)
        return resolve_with_precedence(
            defaults=DirdeckConfig(),
            file_overrides=self.load_file_overrides(),
            env_overrides=env_layer or None,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the raw mapping stored on disk (empty when there is no file)."""
        text = self.read_text()
        if not text:
            return {}
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        return data

    def ensure_exists(self) -> Path:
        """Write the default configuration if no file exists yet."""
        if not self.config_path.exists():
            self.save(DirdeckConfig())
        return self.config_path

    def read_text(self) -> str:
        if not self.config_path.exists():
            return ""
        return self.config_path.read_text(encoding="utf-8")

    def save(self, config: DirdeckConfig | Mapping[str, Any]) -> None:
        """Serialize ``config`` to disk below the standard header and a fresh timestamp."""
        if isinstance(config, DirdeckConfig):
            data = config.model_dump(mode="python")
        else:
            data = dict(config)
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        body = yaml.safe_dump(data, sort_keys=False)
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        self.config_path.write_text(
            "\n".join((*HEADER_LINES, f"{STAMP_PREFIX} {stamp}", "")) + body,
            encoding="utf-8",
        )

    def set_value(self, segments: Sequence[str], value: Any) -> None:
        """Persist ``value`` at the dotted location ``segments`` after validating it.

        Raises:
            ConfigError: If the key cannot be assigned or the result is invalid.
        """
        data = self.load_file_overrides()
        assign_path(data, list(segments), value)
        resolve_with_precedence(defaults=DirdeckConfig(), file_overrides=data)
        self.save(data)

    def replace_text(self, text: str) -> None:
        """Validate edited YAML ``text`` and store it as the new configuration.

        Raises:
            ConfigError: If the text is not a YAML mapping of valid settings.
        """
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError("Configuration file must contain a top-level mapping.")
        resolve_with_precedence(defaults=DirdeckConfig(), file_overrides=data)
        self.save(data)


__all__ = [
    "ConfigError",
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "DirdeckConfig",
    "STAMP_PREFIX",
    "assign_path",
    "flatten_for_env",
    "overrides_from_env",
    "resolve_with_precedence",
]
