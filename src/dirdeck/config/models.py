"""Configuration models describing Dirdeck settings."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DirdeckSettingsModel(BaseModel):
    """Shared configuration for Dirdeck settings models."""

    model_config = ConfigDict(extra="forbid")


class ServerSettings(DirdeckSettingsModel):
    """Backend connection options.

    Attributes:
        base_url: Scheme, host, and port of the storage backend.
        api_prefix: Path prefix under which the JSON API is mounted.
        timeout_seconds: Per-request timeout applied by the HTTP client.
    """

    base_url: str = "http://127.0.0.1:8080"
    api_prefix: str = "/api"
    timeout_seconds: float = 30.0

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("timeout_seconds")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_seconds must be positive")
        return value


class NavigationSettings(DirdeckSettingsModel):
    """Navigation and destination-picker behavior.

    Attributes:
        strict_ordering: Discard listing responses that were superseded by a newer load.
        destination_depth: Folder levels enumerated by the destination picker; ``None``
            walks the whole tree and ``1`` lists only the root's direct subfolders.
    """

    strict_ordering: bool = False
    destination_depth: Optional[int] = Field(default=None, ge=1)


class PreviewSettings(DirdeckSettingsModel):
    """Text preview decoding options.

    Attributes:
        text_encoding: Codec used to decode text previews.
        decode_errors: Error handler passed to ``bytes.decode``.
    """

    text_encoding: str = "utf-8"
    decode_errors: Literal["strict", "replace", "ignore"] = "replace"


class LoggingSettings(DirdeckSettingsModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        file: Optional log file path in addition to console output.
    """

    level: str = "WARNING"
    file: Optional[str] = None


class CLIOptions(DirdeckSettingsModel):
    """CLI behavior defaults.

    Attributes:
        quiet_default: Whether commands hide info and success notifications by default.
        confirm_deletes: Whether `rm` prompts before deleting.
    """

    quiet_default: bool = False
    confirm_deletes: bool = True


class DirdeckConfig(DirdeckSettingsModel):
    """Top-level configuration struct for Dirdeck."""

    server: ServerSettings = Field(default_factory=ServerSettings)
    navigation: NavigationSettings = Field(default_factory=NavigationSettings)
    preview: PreviewSettings = Field(default_factory=PreviewSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "DirdeckSettingsModel",
    "ServerSettings",
    "NavigationSettings",
    "PreviewSettings",
    "LoggingSettings",
    "CLIOptions",
    "DirdeckConfig",
]
