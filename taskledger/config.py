from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

DEFAULT_ROLLUP_URL = "http://127.0.0.1:5004"


@dataclass(slots=True)
class LedgerConfig:
    rollup_url: str
    http_timeout: float
    poll_min_sleep: float
    poll_max_sleep: float
    devserver_host: str
    devserver_port: int


def _float(raw: str | None, default: float) -> float:
    value = (raw or "").strip()
    if not value:
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _int(raw: str | None, default: int) -> int:
    value = (raw or "").strip()
    try:
        return int(value) if value else default
    except ValueError:
        return default


def load_config(env: dict[str, str] | None = None) -> LedgerConfig:
    e: dict[str, Any] = dict(os.environ)
    if env:
        e.update(env)
    rollup_url = (e.get("ROLLUP_HTTP_SERVER_URL") or "").strip() or DEFAULT_ROLLUP_URL
    min_sleep = _float(e.get("ROLLUP_POLL_MIN_SLEEP"), 0.05)
    max_sleep = max(min_sleep, _float(e.get("ROLLUP_POLL_MAX_SLEEP"), 1.0))
    return LedgerConfig(
        rollup_url=rollup_url.rstrip("/"),
        http_timeout=_float(e.get("ROLLUP_HTTP_TIMEOUT"), 30.0),
        poll_min_sleep=min_sleep,
        poll_max_sleep=max_sleep,
        devserver_host=e.get("DEVSERVER_HOST", "127.0.0.1"),
        devserver_port=_int(e.get("DEVSERVER_PORT"), 5004),
    )


__all__ = ["DEFAULT_ROLLUP_URL", "LedgerConfig", "load_config"]
