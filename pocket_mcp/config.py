"""
Configuration helpers for the Pocket Network MCP server.

This module centralizes gateway URL selection, API key loading, default timeouts,
and the safety ceilings used by the query validation engine. No secrets are stored
in the repository; the API key is read from environment or a local file if present.
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

# Default connection settings
DEFAULT_GATEWAY_URL_TEMPLATE = os.getenv(
    "POCKET_GATEWAY_URL_TEMPLATE", "https://{service_id}.api.pocket.network"
)


def _load_timeout() -> float:
    raw_timeout = os.getenv("POCKET_HTTP_TIMEOUT")
    if raw_timeout:
        try:
            return float(raw_timeout)
        except ValueError:
            return 30.0
    return 30.0


DEFAULT_TIMEOUT = _load_timeout()

# API key handling
API_KEY_ENV_VAR = "POCKET_API_KEY"
API_KEY_FILE_ENV_VAR = "POCKET_API_KEY_FILE"
DEFAULT_API_KEY_FILE = "apikey.txt"

# Safety ceilings (conservative)
MAX_TRANSACTIONS_PER_BLOCK = 10
MAX_BLOCK_RANGE = 10
MAX_RESPONSE_SIZE_ESTIMATE_KB = 500
ALLOW_BLOCKS_WITH_TRANSACTIONS = False

MAX_SERVICES_RETURNED = 100
DEFAULT_RATE_LIMIT_QPS = 5
LOG_LEVEL = os.getenv("POCKET_MCP_LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("POCKET_MCP_LOG_FORMAT", "json")  # json or plain


def load_api_key() -> Optional[str]:
    """
    Load the Pocket gateway API key from environment or a local file.

    Returns:
        The API key string if available, otherwise None. The key is never logged
        or returned to callers.
    """
    env_key = os.getenv(API_KEY_ENV_VAR)
    if env_key:
        return env_key.strip()

    key_path = os.getenv(API_KEY_FILE_ENV_VAR, DEFAULT_API_KEY_FILE)
    if key_path:
        path = Path(key_path)
        if path.is_file():
            return path.read_text(encoding="utf-8").strip() or None

    return None


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        parsed = int(raw)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        parsed = float(raw)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y"}


def _parse_per_tool_rate_limits(raw: Optional[str]) -> Dict[str, float]:
    """Parse ``tool=qps,tool2=qps`` pairs, skipping malformed entries."""
    limits: Dict[str, float] = {}
    if not raw:
        return limits
    for chunk in raw.split(","):
        name, sep, value = chunk.partition("=")
        name = name.strip()
        if not sep or not name:
            continue
        try:
            qps = float(value.strip())
        except ValueError:
            continue
        if qps > 0:
            limits[name] = qps
    return limits


@dataclass(frozen=True)
class SafetyConfig:
    """Immutable ceilings consulted by the query safety validators."""

    max_transactions_per_block: int = MAX_TRANSACTIONS_PER_BLOCK
    max_block_range: int = MAX_BLOCK_RANGE
    max_response_size_estimate_kb: int = MAX_RESPONSE_SIZE_ESTIMATE_KB
    allow_blocks_with_transactions: bool = ALLOW_BLOCKS_WITH_TRANSACTIONS

    def __post_init__(self) -> None:
        for name in ("max_transactions_per_block", "max_block_range", "max_response_size_estimate_kb"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"{name} must be a positive integer")

    def tighten(self, **overrides: object) -> "SafetyConfig":
        """
        Return a copy where each override may only make the policy stricter.

        Numeric ceilings take the minimum of the current and requested value;
        ``allow_blocks_with_transactions`` can be switched off but never on.
        """
        values = dataclasses.asdict(self)
        for name, requested in overrides.items():
            if name not in values:
                raise TypeError(f"Unknown safety setting: {name}")
            if name == "allow_blocks_with_transactions":
                values[name] = values[name] and bool(requested)
            elif isinstance(requested, bool) or not isinstance(requested, int) or requested <= 0:
                raise ValueError(f"{name} must be a positive integer")
            else:
                values[name] = min(values[name], requested)
        return SafetyConfig(**values)

    def override(self, **overrides: object) -> "SafetyConfig":
        """Explicit per-call override; may loosen as well as tighten."""
        return dataclasses.replace(self, **overrides)


def load_safety_config() -> SafetyConfig:
    return SafetyConfig(
        max_transactions_per_block=_env_int("POCKET_MCP_MAX_TX_PER_BLOCK", MAX_TRANSACTIONS_PER_BLOCK),
        max_block_range=_env_int("POCKET_MCP_MAX_BLOCK_RANGE", MAX_BLOCK_RANGE),
        max_response_size_estimate_kb=_env_int("POCKET_MCP_MAX_RESPONSE_KB", MAX_RESPONSE_SIZE_ESTIMATE_KB),
        allow_blocks_with_transactions=_env_bool("POCKET_MCP_ALLOW_BLOCK_TXS", ALLOW_BLOCKS_WITH_TRANSACTIONS),
    )


@dataclass(slots=True)
class PocketConfig:
    """Runtime configuration for Pocket Network gateway access."""

    gateway_url_template: str = DEFAULT_GATEWAY_URL_TEMPLATE
    timeout: float = DEFAULT_TIMEOUT
    api_key: Optional[str] = load_api_key()
    default_network: str = "mainnet"
    max_services: int = MAX_SERVICES_RETURNED
    rate_limit_qps: float = _env_float("POCKET_MCP_RATE_LIMIT_QPS", DEFAULT_RATE_LIMIT_QPS)
    log_level: str = LOG_LEVEL
    log_format: str = LOG_FORMAT
    per_tool_rate_limits: dict[str, float] = field(
        default_factory=lambda: _parse_per_tool_rate_limits(os.getenv("POCKET_MCP_PER_TOOL_RATE_LIMITS"))
    )
    safety: SafetyConfig = field(default_factory=load_safety_config)


default_config = PocketConfig()
default_safety_config = default_config.safety
