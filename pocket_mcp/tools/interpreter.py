"""Map simple natural-language requests onto a single RPC call."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from pocket_mcp.pocket_api.services import BlockchainService, service_name_index

EVM_ADDRESS_IN_TEXT = re.compile(r"\b0x[0-9a-fA-F]{40}\b")
BASE58_ADDRESS_IN_TEXT = re.compile(r"\b[1-9A-HJ-NP-Za-km-z]{32,44}\b")
SUI_ADDRESS_IN_TEXT = re.compile(r"\b0x[0-9a-fA-F]{64}\b")

# (intent, keyword pattern, protocol -> method). Evaluated in order.
INTENTS: Tuple[Tuple[str, re.Pattern, dict], ...] = (
    (
        "gas_price",
        re.compile(r"\bgas\s*price\b|\bgas\b", re.IGNORECASE),
        {"evm": "eth_gasPrice", "sui": "suix_getReferenceGasPrice"},
    ),
    (
        "chain_id",
        re.compile(r"\bchain\s*id\b|\bchain\s*identifier\b", re.IGNORECASE),
        {"evm": "eth_chainId", "sui": "sui_getChainIdentifier"},
    ),
    (
        "slot",
        re.compile(r"\bslot\b", re.IGNORECASE),
        {"solana": "getSlot"},
    ),
    (
        "height",
        re.compile(r"\bheight\b|\bblock\s*number\b|\blatest\s+block\b|\bcurrent\s+block\b|\bcheckpoint\b", re.IGNORECASE),
        {
            "evm": "eth_blockNumber",
            "solana": "getBlockHeight",
            "sui": "sui_getLatestCheckpointSequenceNumber",
            "cosmos": "status",
        },
    ),
)


@dataclass(frozen=True)
class QueryPlan:
    service: BlockchainService
    intent: str
    method: str
    params: List[Any] = field(default_factory=list)


def _word_pattern(name: str) -> re.Pattern:
    return re.compile(rf"(?<![\w-]){re.escape(name)}(?![\w-])", re.IGNORECASE)


def find_service_in_text(text: str) -> Optional[BlockchainService]:
    for name, service in service_name_index():
        if _word_pattern(name).search(text):
            return service
    return None


def _balance_plan(text: str, service: BlockchainService) -> Optional[QueryPlan]:
    if service.protocol == "evm":
        match = EVM_ADDRESS_IN_TEXT.search(text)
        if match:
            return QueryPlan(service, "balance", "eth_getBalance", [match.group(0), "latest"])
    elif service.protocol == "solana":
        match = BASE58_ADDRESS_IN_TEXT.search(text)
        if match:
            return QueryPlan(service, "balance", "getBalance", [match.group(0)])
    elif service.protocol == "sui":
        match = SUI_ADDRESS_IN_TEXT.search(text)
        if match:
            return QueryPlan(service, "balance", "suix_getBalance", [match.group(0)])
    return None


def interpret_query(text: str) -> Optional[QueryPlan]:
    """Return a plan for the first recognized intent, or None."""
    if not isinstance(text, str) or not text.strip():
        return None
    service = find_service_in_text(text)
    if service is None:
        return None

    if re.search(r"\bbalance\b", text, re.IGNORECASE):
        return _balance_plan(text, service)

    for intent, pattern, methods in INTENTS:
        if pattern.search(text):
            method = methods.get(service.protocol)
            if method is None:
                continue
            return QueryPlan(service, intent, method, [])
    return None
