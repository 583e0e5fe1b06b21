"""Layering of configuration sources into one validated :class:`DirdeckConfig`."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import DirdeckConfig

ENV_PREFIX = "DIRDECK__"


def resolve_with_precedence(
    *,
    defaults: DirdeckConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> DirdeckConfig:
    """Merge configuration sources, later sources winning.

    The order is defaults < file < environment < CLI. Keys in any source may be
    nested mappings or dotted paths such as ``server.base_url``.

    Raises:
        ConfigError: If a source is malformed or the merged result fails validation.
    """
    layers: Sequence[tuple[str, Optional[Mapping[str, Any]]]] = (
        ("file", file_overrides),
        ("environment", env_overrides),
        ("cli", cli_overrides),
    )
    merged = defaults.model_dump(mode="python")
    for label, layer in layers:
        if layer is not None:
            merged = _deep_merge(merged, _expand_dotted(layer, label))

    try:
        return DirdeckConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def overrides_from_env(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``DIRDECK__SECTION__KEY`` variables into a nested override mapping.

    Values are parsed as YAML literals so ``"5"`` becomes ``5`` and ``"false"``
    becomes ``False``; anything YAML rejects is kept as the raw string.
    """
    overrides: dict[str, Any] = {}
    for key, raw in env.items():
        if not key.startswith(ENV_PREFIX):
            continue
        segments = [part.lower() for part in key[len(ENV_PREFIX) :].split("__") if part]
        if not segments:
            continue
        try:
            value: Any = yaml.safe_load(raw)
        except yaml.YAMLError:
            value = raw
        assign_path(overrides, segments, value, label="environment")
    return overrides


def flatten_for_env(config: DirdeckConfig) -> Dict[str, str]:
    """Render ``config`` as the environment variables that would reproduce it."""
    flat: Dict[str, str] = {}
    for segments, value in _leaves([], config.model_dump(mode="python")):
        flat[ENV_PREFIX + "__".join(part.upper() for part in segments)] = _render_env(value)
    return flat


def assign_path(
    target: dict[str, Any], segments: Sequence[str], value: Any, *, label: str = "cli"
) -> None:
    """Store ``value`` at ``segments`` inside ``target``, creating mappings on the way.

    Raises:
        ConfigError: If an intermediate segment already holds a non-mapping value.
    """
    node = target
    for index, segment in enumerate(segments[:-1]):
        child = node.setdefault(segment, {})
        if not isinstance(child, dict):
            dotted = ".".join(segments[: index + 1])
            raise ConfigError(f"{label.capitalize()} override cannot descend into {dotted}.")
        node = child
    leaf = segments[-1]
    if isinstance(value, MappingABC) and isinstance(node.get(leaf), MappingABC):
        node[leaf] = _deep_merge(node[leaf], _expand_dotted(value, label))
    elif isinstance(value, MappingABC):
        node[leaf] = _expand_dotted(value, label)
    else:
        node[leaf] = value


def _expand_dotted(source: Mapping[str, Any], label: str) -> dict[str, Any]:
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{label.capitalize()} overrides must be a mapping.")
    expanded: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{label.capitalize()} override keys must be strings.")
        assign_path(expanded, key.split("."), value, label=label)
    return expanded


def _leaves(prefix: list[str], value: Any) -> Iterable[tuple[list[str], Any]]:
    if isinstance(value, dict):
        for key, child in value.items():
            yield from _leaves(prefix + [str(key)], child)
    else:
        yield prefix, value


def _render_env(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return yaml.safe_dump(value, default_flow_style=True).strip()
    return str(value)


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = {key: deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, MappingABC) and isinstance(current, MappingABC):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = [
    "ENV_PREFIX",
    "assign_path",
    "flatten_for_env",
    "overrides_from_env",
    "resolve_with_precedence",
]
