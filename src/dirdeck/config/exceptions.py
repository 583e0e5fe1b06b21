"""Exceptions raised while loading or validating Dirdeck configuration."""

from __future__ import annotations

from dirdeck.errors import DirdeckError


class ConfigError(DirdeckError):
    """Raised when a config file, environment override, or CLI override is invalid."""
