"""Helpers for loading and updating ranking configuration snapshots."""
from __future__ import annotations

import dataclasses
import json
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

from .errors import BackendError, ErrorCode
from .models import RankingConfiguration

DEFAULT_CONFIG_PATH = Path("config/defaults.json")
ENV_PREFIX = "INSIGHTS_RANK_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(slots=True)
class ConfigDocument:
    source: Path
    version: int
    ranking: RankingConfiguration


def load_ranking_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> RankingConfiguration:
    """Resolve a ranking snapshot: defaults < file < overrides < environment."""

    document = load_config_document(config_path=config_path, overrides=overrides)
    env = os.environ if environ is None else environ
    config = document.ranking
    for name in _SETTINGS:
        raw = env.get(ENV_PREFIX + name.upper())
        if raw is None:
            continue
        config = update_setting(config, name, raw)
    return config


def load_config_document(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> ConfigDocument:
    cfg_path = config_path or DEFAULT_CONFIG_PATH
    if config_path is None and not cfg_path.exists():
        raw: Dict[str, Any] = {"version": 1, "ranking": {}}
    else:
        raw = _read_config_json(cfg_path)

    version = _require_positive_int(raw.get("version"), "version", cfg_path)
    section = raw.get("ranking", {})
    if not isinstance(section, Mapping):
        raise BackendError(ErrorCode.CONFIG_ERROR, f"'ranking' section must be an object in {cfg_path}")

    data = {**section, **(overrides or {})}
    unknown = sorted(set(data) - set(_SETTINGS))
    if unknown:
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"Unknown ranking settings {unknown} in {cfg_path}",
        )
    values = {
        name: _SETTINGS[name](value, f"ranking.{name}", cfg_path)
        for name, value in data.items()
    }
    return ConfigDocument(source=cfg_path, version=version, ranking=RankingConfiguration(**values))


def update_setting(config: RankingConfiguration, name: str, value: str) -> RankingConfiguration:
    """Validate a textual setting value and return a new snapshot carrying it."""

    key = name.strip().lower().replace("-", "_")
    parser = _SETTINGS.get(key)
    if parser is None:
        allowed = ", ".join(sorted(_SETTINGS))
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"Unknown setting '{name}'. Allowed: {allowed}",
        )
    return dataclasses.replace(config, **{key: parser(value, key, None)})


def config_to_dict(config: RankingConfiguration) -> Dict[str, Any]:
    return {item.name: getattr(config, item.name) for item in dataclasses.fields(config)}


# ---------------------------------------------------------------------------
# Internal helpers


def _read_config_json(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except FileNotFoundError as exc:
        raise BackendError(ErrorCode.CONFIG_ERROR, f"Config file '{path}' not found") from exc
    except json.JSONDecodeError as exc:
        raise BackendError(ErrorCode.CONFIG_ERROR, f"Config file '{path}' is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise BackendError(ErrorCode.CONFIG_ERROR, f"Config file '{path}' must contain an object")
    return payload


def _where(source: Optional[Path]) -> str:
    return f" in {source}" if source else ""


def _require_bool(value: Any, field: str, source: Optional[Path]) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
    raise BackendError(ErrorCode.CONFIG_ERROR, f"{field} must be a boolean{_where(source)}")


def _require_int(value: Any, field: str, source: Optional[Path]) -> int:
    if isinstance(value, bool):
        raise BackendError(ErrorCode.CONFIG_ERROR, f"{field} must be an integer{_where(source)}")
    try:
        return int(str(value).strip()) if isinstance(value, str) else int(value)
    except (TypeError, ValueError) as exc:
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"{field} must be an integer{_where(source)}",
        ) from exc


def _require_positive_int(value: Any, field: str, source: Optional[Path]) -> int:
    num = _require_int(value, field, source)
    if num <= 0:
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"{field} must be greater than zero{_where(source)}",
        )
    return num


def _require_float(value: Any, field: str, source: Optional[Path]) -> float:
    if isinstance(value, bool):
        raise BackendError(ErrorCode.CONFIG_ERROR, f"{field} must be a number{_where(source)}")
    try:
        num = float(value)
    except (TypeError, ValueError) as exc:
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"{field} must be a number{_where(source)}",
        ) from exc
    if not math.isfinite(num):
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"{field} must be a finite number{_where(source)}",
        )
    return num


def _require_text(value: Any, field: str, source: Optional[Path]) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise BackendError(ErrorCode.CONFIG_ERROR, f"{field} must be a string{_where(source)}")
    return value.strip()


_SETTINGS: Dict[str, Callable[[Any, str, Optional[Path]], Any]] = {
    "enabled": _require_bool,
    # Non-positive sizes and caps are accepted and fall back to defaults at use time.
    "sample_size": _require_int,
    "distinct_cap": _require_int,
    "length_cap": _require_int,
    "weight_presence": _require_float,
    "weight_variability": _require_float,
    "weight_length_penalty": _require_float,
    "weight_type": _require_float,
    "al_prefix_boost": _require_float,
    "al_min_presence": _require_float,
    "rule_spec": _require_text,
    "pinned": _require_text,
}
