from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any

import yaml


class ConfigError(RuntimeError):
    """Raised when a bucketing config cannot be loaded or resolved."""

    pass


def _merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Overlay ``overlay`` onto a copy of ``base``, recursing into mappings."""
    out = deepcopy(base)
    for key, value in overlay.items():
        if key == "base_config":
            continue
        current = out.get(key)
        out[key] = _merge(current, value) if isinstance(current, dict) and isinstance(value, dict) else deepcopy(value)
    return out


def _read_mapping(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")
    return data


def load_config(path: str | Path) -> dict[str, Any]:
    """Load a bucketing config, following its ``base_config`` chain.

    Args:
        path: Entry config file path.

    Returns:
        Resolved config dictionary.

    How it works:
        ``base_config`` is resolved relative to the file naming it. The chain
        is walked to its root first, then each file is overlaid on the one
        it extends, so the entry file wins.
    """
    chain: list[dict[str, Any]] = []
    seen: set[Path] = set()
    current: Path | None = Path(path).resolve()
    while current is not None:
        if current in seen:
            raise ConfigError(f"cyclic base_config reference detected at: {current}")
        seen.add(current)
        data = _read_mapping(current)
        chain.append(data)

        ref = data.get("base_config")
        if not ref:
            current = None
            continue
        parent = (current.parent / str(ref)).resolve()
        if not parent.is_file():
            raise ConfigError(f"base_config not found: {ref} (from {current})")
        current = parent

    cfg: dict[str, Any] = {}
    for data in reversed(chain):
        cfg = _merge(cfg, data)
    return cfg


def save_config(cfg: dict[str, Any], path: str | Path) -> None:
    dst = Path(path)
    dst.parent.mkdir(parents=True, exist_ok=True)
    dst.write_text(yaml.safe_dump(cfg, sort_keys=False), encoding="utf-8")


def ensure_required_sections(cfg: dict[str, Any]) -> None:
    """Require a ``bucketing`` mapping.

    Raises:
        ConfigError: If the section is missing or not a mapping.
    """
    if "bucketing" not in cfg:
        raise ConfigError("config missing required sections: bucketing")
    if not isinstance(cfg["bucketing"], dict):
        raise ConfigError("config section must be a mapping: bucketing")


def apply_overrides(cfg: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``cfg`` with dotted keys such as ``bucketing.log_base`` replaced."""
    out = deepcopy(cfg)
    for dotted_key, value in overrides.items():
        *parents, leaf = dotted_key.split(".")
        node = out
        for part in parents:
            node = node.setdefault(part, {})
            if not isinstance(node, dict):
                raise ConfigError(f"cannot set {dotted_key}: {part} is not a mapping")
        node[leaf] = value
    return out


def parse_overrides(items: list[str]) -> dict[str, Any]:
    """Parse ``key=value`` tokens, decoding each value with ``yaml.safe_load``.

    Args:
        items: List like ``['bucketing.buckets_per_magnitude=16']``.

    Returns:
        Mapping from dotted key to typed value.
    """
    out = {}
    for item in items:
        key, sep, raw = item.partition("=")
        if not sep or not key:
            raise ConfigError(f"override must be key=value: {item}")
        out[key] = yaml.safe_load(raw)
    return out
