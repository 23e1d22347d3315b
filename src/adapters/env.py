from __future__ import annotations

import os


def env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def env_str(name: str, default: str | None = None) -> str | None:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip() or default


def env_float(name: str, default: float) -> float:
    """Read a float setting; blank values fall back to `default`.

    Raises ValueError for values that are set but not numeric.
    """

    raw = env_str(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid {name}: {raw!r}") from exc


def env_int(name: str, default: int) -> int:
    return int(env_float(name, float(default)))
