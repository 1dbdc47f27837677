"""Shared validation helpers for Pocket MCP tools."""

from __future__ import annotations

import re
from typing import Any, Optional

# EVM addresses are 20 bytes, hex encoded with a 0x prefix.
EVM_ADDRESS_REGEX = re.compile(r"^0x[0-9a-fA-F]{40}$")
TX_HASH_REGEX = re.compile(r"^0x[0-9a-fA-F]{64}$")
HEX_QUANTITY_REGEX = re.compile(r"^0x[0-9a-fA-F]+$")

NETWORKS = ("mainnet", "testnet")
BLOCK_TAGS = ("latest", "earliest", "pending", "safe", "finalized")


def is_valid_evm_address(address: Optional[str]) -> bool:
    """Basic format validation for EVM addresses (checksum is not verified)."""
    if not address or not isinstance(address, str):
        return False
    return bool(EVM_ADDRESS_REGEX.fullmatch(address.strip()))


def is_valid_tx_hash(tx_hash: Optional[str]) -> bool:
    if not tx_hash or not isinstance(tx_hash, str):
        return False
    return bool(TX_HASH_REGEX.fullmatch(tx_hash.strip()))


def normalize_network(network: Optional[str]) -> Optional[str]:
    """Return ``mainnet``/``testnet`` (default mainnet), or None when unrecognized."""
    if network is None:
        return "mainnet"
    if not isinstance(network, str):
        return None
    normalized = network.strip().lower() or "mainnet"
    return normalized if normalized in NETWORKS else None


def normalize_block_identifier(value: Any) -> Optional[str]:
    """
    Convert a block number, hex quantity, block tag or block hash to RPC form.

    Integers and decimal strings become ``0x`` quantities. Returns None for anything
    that cannot identify a block.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return hex(value) if value >= 0 else None
    if not isinstance(value, str):
        return None
    text = value.strip()
    if text.lower() in BLOCK_TAGS:
        return text.lower()
    if TX_HASH_REGEX.fullmatch(text):
        return text
    if HEX_QUANTITY_REGEX.fullmatch(text):
        return "0x" + text[2:].lower()
    if text.isdigit():
        return hex(int(text))
    return None


def clamp_limit(value: Optional[int], *, default: int, max_value: int) -> int:
    """Clamp limit/offset-style integers to configured bounds."""
    if value is None:
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    if parsed < 0:
        return default
    return min(parsed, max_value)
