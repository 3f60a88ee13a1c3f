from __future__ import annotations

from typing import Any

from histobucket.utils.config import ConfigError

from .base import U64_MAX, Bucketing, validate_sample
from .functional import Functional

_LOG_KEYS = ("log_base", "buckets_per_magnitude")


def _build_functional(section: dict[str, Any]) -> Functional:
    """Build functional bucketing from either serialized or log parameters."""
    has_exponent = "exponent" in section
    given = [k for k in _LOG_KEYS if k in section]

    if has_exponent and given:
        raise ConfigError(f"bucketing.exponent cannot be combined with {', '.join(given)}")
    try:
        if has_exponent:
            return Functional.from_exponent(float(section["exponent"]))
        missing = [k for k in _LOG_KEYS if k not in section]
        if missing:
            raise ConfigError(f"functional bucketing missing keys: {', '.join(missing)}")
        return Functional(
            log_base=float(section["log_base"]),
            buckets_per_magnitude=float(section["buckets_per_magnitude"]),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"invalid functional bucketing: {exc}") from exc


def build_bucketing(cfg: dict[str, Any]) -> Bucketing:
    """Instantiate the bucketing strategy described by ``cfg['bucketing']``.

    Args:
        cfg: Full config dictionary.

    Returns:
        Strategy implementing ``Bucketing``.

    Raises:
        ConfigError: If the section is missing, malformed, or names an
            unsupported kind.
    """
    section = cfg.get("bucketing")
    if not isinstance(section, dict):
        raise ConfigError("config missing required sections: bucketing")
    kind = str(section.get("kind", "functional")).strip().lower()

    if kind == "functional":
        return _build_functional(section)

    raise ConfigError(f"unsupported bucketing kind: {kind} (available: ['functional'])")


def bucketing_section(strategy: Bucketing) -> dict[str, Any]:
    """Serialize a strategy back into a ``bucketing`` config section."""
    if isinstance(strategy, Functional):
        return {"kind": "functional", **strategy.to_dict()}
    raise ConfigError(f"cannot serialize bucketing strategy: {type(strategy).__name__}")


__all__ = [
    "Bucketing",
    "Functional",
    "U64_MAX",
    "bucketing_section",
    "build_bucketing",
    "validate_sample",
]
