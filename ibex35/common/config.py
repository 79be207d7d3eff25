"""Gateway configuration loaded from the environment."""

import os
from dataclasses import dataclass

from ibex35.common.constants import DEFAULT_API_URL


@dataclass(frozen=True)
class GatewayConfig:
    """Remote API location and credentials"""

    api_url: str = DEFAULT_API_URL
    api_key: str | None = None
    timeout: float | None = None  # None: no timeout at this layer


def get_timeout(env: dict[str, str]) -> float | None:
    """Parse IBEX35_TIMEOUT (seconds), None when unset or empty"""
    raw = env.get("IBEX35_TIMEOUT", "").strip()
    if not raw:
        return None
    try:
        timeout = float(raw)
    except ValueError:
        msg = f"Invalid IBEX35_TIMEOUT value: {raw}"
        raise ValueError(msg) from None
    if timeout <= 0:
        msg = f"IBEX35_TIMEOUT must be positive, got {raw}"
        raise ValueError(msg)
    return timeout


def load_config(env: dict[str, str] | None = None) -> GatewayConfig:
    """Build GatewayConfig from IBEX35_API_URL / IBEX35_API_KEY / IBEX35_TIMEOUT"""
    if env is None:
        env = dict(os.environ)
    api_url = (env.get("IBEX35_API_URL") or DEFAULT_API_URL).rstrip("/")
    api_key = env.get("IBEX35_API_KEY") or None
    return GatewayConfig(api_url=api_url, api_key=api_key, timeout=get_timeout(env))
