"""Numeric and structural checks for block fetches and log filters."""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional, Sequence

from pocket_mcp.config import SafetyConfig, default_safety_config
from pocket_mcp.safety.classifier import BLOCK_FETCH_METHODS
from pocket_mcp.safety.verdict import SafetyVerdict

LATEST_MARKER = "latest"

HEX_DIGITS_REGEX = re.compile(r"[0-9a-fA-F]+")
DECIMAL_DIGITS_REGEX = re.compile(r"[0-9]+")

UNRESTRICTED_LOGS_REASON = "Unrestricted log queries can return massive amounts of data"
UNRESTRICTED_LOGS_SUGGESTION = "Add address or topic filters to limit results"


def parse_block_number(value: Any) -> Optional[int]:
    """
    Parse a block bound given as an int or a hex (``0x``) / decimal string.

    Returns None for anything that is not a non-negative integer, including
    booleans and block tags such as ``earliest``.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float):
        return int(value) if value.is_integer() and value >= 0 else None
    if not isinstance(value, str):
        return None
    text = value.strip()
    if text[:2].lower() == "0x":
        digits = text[2:]
        if not HEX_DIGITS_REGEX.fullmatch(digits):
            return None
        return int(digits, 16)
    if DECIMAL_DIGITS_REGEX.fullmatch(text):
        return int(text, 10)
    return None


def _is_latest(value: Any) -> bool:
    return isinstance(value, str) and value.strip().lower() == LATEST_MARKER


def wants_transactions(params: Optional[Sequence[Any]]) -> bool:
    """True when the include-transactions flag (``params[1]``) is ``True`` or ``"true"``."""
    if not isinstance(params, (list, tuple)) or len(params) < 2:
        return False
    flag = params[1]
    if isinstance(flag, str):
        return flag.strip().lower() == "true"
    return flag is True


def _has_filter_constraint(log_filter: Mapping[str, Any]) -> bool:
    address = log_filter.get("address")
    if isinstance(address, (list, tuple)):
        has_address = any(address)
    else:
        has_address = bool(address)

    topics = log_filter.get("topics")
    if isinstance(topics, (list, tuple)):
        # A topics array made only of null wildcards constrains nothing.
        has_topics = any(topic is not None for topic in topics)
    else:
        has_topics = bool(topics)
    return has_address or has_topics


def check_block_query(
    method: str,
    params: Optional[Sequence[Any]],
    config: SafetyConfig = default_safety_config,
) -> SafetyVerdict:
    """Validate a block-by-number / block-by-hash fetch."""
    if method not in BLOCK_FETCH_METHODS:
        return SafetyVerdict.ok()
    if not wants_transactions(params):
        return SafetyVerdict.ok()

    if not config.allow_blocks_with_transactions:
        return SafetyVerdict.block(
            "Requesting blocks with full transactions is disabled to prevent context overflow",
            "Use eth_getBlockByNumber with false parameter to get block without transactions, "
            "or query specific transactions by hash",
        )

    # Still refused when the policy allows it: a single block can carry 100+ transactions.
    return SafetyVerdict.block(
        "Blocks can contain 100+ transactions, causing session crashes",
        "Query specific transactions by hash instead, or use a block explorer API",
    )


def check_log_query(
    params: Optional[Sequence[Any]],
    config: SafetyConfig = default_safety_config,
) -> SafetyVerdict:
    """Validate an ``eth_getLogs`` style filter (``params[0]``)."""
    log_filter = params[0] if isinstance(params, (list, tuple)) and params else None
    if not isinstance(log_filter, Mapping):
        return SafetyVerdict.block(UNRESTRICTED_LOGS_REASON, UNRESTRICTED_LOGS_SUGGESTION)

    from_block = log_filter.get("fromBlock")
    to_block = log_filter.get("toBlock")
    if to_block is None:
        to_block = LATEST_MARKER

    if from_block is not None and not _is_latest(from_block) and not _is_latest(to_block):
        start = parse_block_number(from_block)
        end = parse_block_number(to_block)
        if start is None or end is None:
            return SafetyVerdict.block(
                "Unable to validate block range safety",
                "Specify explicit numeric block ranges",
            )
        block_range = end - start
        if block_range > config.max_block_range:
            return SafetyVerdict.block(
                f"Block range {block_range} exceeds maximum {config.max_block_range}",
                "Reduce the block range or use pagination",
            )

    if not _has_filter_constraint(log_filter):
        return SafetyVerdict.block(UNRESTRICTED_LOGS_REASON, UNRESTRICTED_LOGS_SUGGESTION)

    return SafetyVerdict.ok()
