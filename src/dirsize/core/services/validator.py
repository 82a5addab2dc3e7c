from __future__ import annotations

"""
Configuration Validation Service.

Gatekeeper between untrusted configuration sources (config file, CLI
overrides) and the core. Coerces types, normalises enumerated choices and
injects defaults so the interfaces always receive a well-formed mapping.
"""

import logging
from typing import Any, Dict, List, Tuple

from dirsize.domain.config import get_default_config
from dirsize.domain.tree_models import EntryKind, SortKey
from dirsize.infra.fs import normalize_path

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the provided configuration dictionary.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raises exceptions on type mismatch instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: The normalized configuration and
                                          a list of warnings.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    merged["target_path"] = normalize_path(
        _as_str(merged.get("target_path"), defaults["target_path"], "target_path", warnings, strict),
        defaults["target_path"],
    )
    for field in ("fatal_on_access_denied", "log_to_file"):
        merged[field] = _as_bool(merged.get(field), defaults[field], field, warnings, strict)

    merged["page_size"] = _as_positive_int(
        merged.get("page_size"), defaults["page_size"], "page_size", warnings, strict
    )
    merged["sort_key"] = _as_choice(
        merged.get("sort_key"), [k.value for k in SortKey],
        defaults["sort_key"], "sort_key", warnings, strict
    )
    merged["search_kind"] = _as_choice(
        merged.get("search_kind"), [k.value for k in EntryKind],
        defaults["search_kind"], "search_kind", warnings, strict
    )
    merged["log_level"] = _as_choice(
        merged.get("log_level"), list(_LOG_LEVELS),
        defaults["log_level"], "log_level", warnings, strict
    ).upper()

    return merged, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _reject(msg: str, warnings: List[str], strict: bool) -> None:
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")


def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and sanitize string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback
    _reject(f"Invalid field '{field}': expected str, received {type(value).__name__}.", warnings, strict)
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    _reject(f"Invalid field '{field}': expected bool, received {type(value).__name__}.", warnings, strict)
    return fallback


def _as_positive_int(value: Any, fallback: int, field: str, warnings: List[str], strict: bool) -> int:
    """Accept integers >= 1, coercing numeric strings when not strict."""
    if value is None:
        return fallback
    if isinstance(value, str) and not strict:
        try:
            value = int(value.strip())
            warnings.append(f"Field '{field}' converted from string to int.")
        except ValueError:
            pass
    if isinstance(value, int) and not isinstance(value, bool) and value >= 1:
        return value
    _reject(f"Invalid field '{field}': expected positive int, received {value!r}.", warnings, strict)
    return fallback


def _as_choice(
        value: Any,
        choices: List[str],
        fallback: str,
        field: str,
        warnings: List[str],
        strict: bool,
) -> str:
    """Normalise a case-insensitive enumerated string."""
    if value is None:
        return fallback
    if isinstance(value, str):
        for choice in choices:
            if value.strip().lower() == choice.lower():
                return choice
    _reject(f"Invalid field '{field}': expected one of {choices}, received {value!r}.", warnings, strict)
    return fallback
