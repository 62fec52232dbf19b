"""Configuration precedence and environment flattening."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Mapping

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import FileprobeConfig

ENV_PREFIX = "FILEPROBE__"
_SOURCES = ("file", "environment", "cli")


def resolve_with_precedence(
    *,
    defaults: FileprobeConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> FileprobeConfig:
    """Layer overrides onto ``defaults``: file, then environment, then CLI.

    Keys may be nested mappings or dotted paths such as ``digest.chunk_size``.

    Raises:
        ConfigError: If an override is malformed or the merged values fail validation.
    """
    merged = defaults.model_dump(mode="python")
    for source_name, source in zip(_SOURCES, (file_overrides, env_overrides, cli_overrides)):
        if source is not None:
            merged = _deep_merge(merged, _expand_dotted(source, source_name))

    try:
        return FileprobeConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def flatten_for_env(config: FileprobeConfig) -> Dict[str, str]:
    """Render ``config`` as ``FILEPROBE__SECTION__KEY`` environment assignments."""
    flat: Dict[str, str] = {}

    def _walk(prefix: tuple[str, ...], value: Any) -> None:
        if isinstance(value, dict):
            for key, child in value.items():
                _walk(prefix + (str(key),), child)
            return
        key = ENV_PREFIX + "__".join(part.upper() for part in prefix)
        if isinstance(value, list):
            flat[key] = yaml.safe_dump(value, default_flow_style=True).strip()
        elif value is None:
            flat[key] = "null"
        else:
            flat[key] = str(value)

    _walk((), config.model_dump(mode="python"))
    return flat


def parse_env(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``FILEPROBE__`` variables into a nested override mapping.

    Values are parsed as YAML scalars so ``true``/``8192``/``null`` keep their types.
    """
    overrides: dict[str, Any] = {}
    for key, raw_value in env.items():
        if not key.startswith(ENV_PREFIX):
            continue
        segments = [segment.lower() for segment in key[len(ENV_PREFIX) :].split("__") if segment]
        if not segments:
            continue
        try:
            value: Any = yaml.safe_load(raw_value)
        except yaml.YAMLError:
            value = raw_value
        assign_nested(overrides, segments, value)
    return overrides


def assign_nested(target: dict[str, Any], path: list[str], value: Any) -> None:
    """Set ``value`` at ``path`` inside ``target``, creating mappings on the way.

    Raises:
        ConfigError: If a non-mapping value sits on the path.
    """
    node = target
    for segment in path[:-1]:
        child = node.setdefault(segment, {})
        if not isinstance(child, dict):
            raise ConfigError(f"Cannot assign into '{segment}' because it is not a mapping.")
        node = child
    node[path[-1]] = value


def _expand_dotted(source: Mapping[str, Any], source_name: str) -> dict[str, Any]:
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{source_name.capitalize()} overrides must be a mapping.")

    expanded: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{source_name.capitalize()} override keys must be strings.")
        if isinstance(value, MappingABC):
            value = _expand_dotted(value, source_name)
        path = key.split(".")
        try:
            existing = _lookup(expanded, path)
        except ConfigError as exc:
            raise ConfigError(
                f"{source_name.capitalize()} override for {key} conflicts with existing value."
            ) from exc
        if isinstance(value, dict) and isinstance(existing, dict):
            value = _deep_merge(existing, value)
        try:
            assign_nested(expanded, path, value)
        except ConfigError as exc:
            raise ConfigError(
                f"{source_name.capitalize()} override for {key} conflicts with existing value."
            ) from exc
    return expanded


def _lookup(target: dict[str, Any], path: list[str]) -> Any:
    node: Any = target
    for segment in path:
        if not isinstance(node, dict):
            raise ConfigError("path crosses a scalar value")
        if segment not in node:
            return None
        node = node[segment]
    return node


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = {key: deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, MappingABC) and isinstance(current, MappingABC):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = ["resolve_with_precedence", "flatten_for_env", "parse_env", "assign_nested", "ENV_PREFIX"]
