"""Client configuration loaded from environment variables."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass

DEFAULT_URL = "http://127.0.0.1:5000"
DEFAULT_TIMEOUT = 10.0

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"", "0", "false", "no", "off"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"{name} must be a positive finite number, got {raw!r}")
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


@dataclass
class Settings:
    """Where the table service lives and how to talk to it."""

    url: str = DEFAULT_URL
    timeout: float = DEFAULT_TIMEOUT
    strict_schema: bool = False

    @classmethod
    def from_env(cls) -> Settings:
        """Build Settings from GAMESHOP_* environment variables."""
        url = os.getenv("GAMESHOP_URL", "").strip() or DEFAULT_URL
        return cls(
            url=url.rstrip("/"),
            timeout=_env_float("GAMESHOP_TIMEOUT", DEFAULT_TIMEOUT),
            strict_schema=_env_bool("GAMESHOP_STRICT_SCHEMA", False),
        )
