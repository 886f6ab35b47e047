from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .deadlock import DEADLOCK_MODES, DeadlockMode
from .search import MAX_STATES

DEFAULT_SOLVER_CONFIG: dict[str, Any] = {
    "max_states": MAX_STATES,
    "deadlock_mode": "corner",
    "deadline_s": None,
    "progress": None,
    "progress_refresh_s": 0.25,
}


@dataclass(frozen=True, slots=True)
class SolverConfig:
    max_states: int
    deadlock_mode: DeadlockMode
    deadline_s: float | None
    progress: bool | None
    progress_refresh_s: float


def load_config(path: str) -> dict[str, Any]:
    data = json.loads(Path(path).read_text())
    if not isinstance(data, dict):
        raise ValueError(f"config file {path} must contain a JSON object")
    return _expand_env_vars(data)


def _expand_env_vars(value: Any) -> Any:
    if isinstance(value, str):
        return os.path.expandvars(value)
    if isinstance(value, list):
        return [_expand_env_vars(item) for item in value]
    if isinstance(value, dict):
        return {str(k): _expand_env_vars(v) for k, v in value.items()}
    return value


def merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {**base}
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


def _as_int(value: Any, *, key: str) -> int:
    # Env-expanded values arrive as strings.
    if isinstance(value, bool):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{key} must be an integer, got {value!r}") from exc


def _as_float(value: Any, *, key: str) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{key} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{key} must be a number, got {value!r}") from exc


def resolve_solver_config(
    config: dict[str, Any] | None = None,
    overrides: dict[str, Any] | None = None,
) -> SolverConfig:
    """Merge defaults, a loaded config and explicit overrides into a SolverConfig.

    ``None`` values in ``overrides`` are ignored so unset CLI flags fall
    through to the config file. A nested ``solver`` object is also accepted.
    """
    merged = dict(DEFAULT_SOLVER_CONFIG)
    if config:
        section = config.get("solver", config)
        if not isinstance(section, dict):
            raise ValueError("solver config section must be an object")
        merged = merge_dicts(
            merged, {k: v for k, v in section.items() if k in DEFAULT_SOLVER_CONFIG}
        )
    if overrides:
        merged = merge_dicts(merged, {k: v for k, v in overrides.items() if v is not None})

    max_states = _as_int(merged["max_states"], key="max_states")
    if max_states < 1:
        raise ValueError("max_states must be >= 1")

    deadlock_mode = str(merged["deadlock_mode"])
    if deadlock_mode not in DEADLOCK_MODES:
        raise ValueError(
            f"deadlock_mode must be one of: {', '.join(DEADLOCK_MODES)}"
        )

    deadline_raw = merged["deadline_s"]
    deadline_s = (
        None
        if deadline_raw in (None, "")
        else _as_float(deadline_raw, key="deadline_s")
    )
    if deadline_s is not None and deadline_s <= 0:
        raise ValueError("deadline_s must be > 0 when provided")

    progress_raw = merged["progress"]
    if progress_raw is not None and not isinstance(progress_raw, bool):
        raise ValueError(f"progress must be a boolean, got {progress_raw!r}")

    refresh_s = _as_float(merged["progress_refresh_s"], key="progress_refresh_s")
    if refresh_s < 0:
        raise ValueError("progress_refresh_s must be >= 0")

    return SolverConfig(
        max_states=max_states,
        deadlock_mode=deadlock_mode,  # type: ignore[arg-type]
        deadline_s=deadline_s,
        progress=progress_raw,
        progress_refresh_s=refresh_s,
    )
