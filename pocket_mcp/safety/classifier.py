"""Static risk classification of RPC method names."""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional


class MethodRisk(Enum):
    """Kinds of dangerous method, each with its own validator."""

    BLOCK_FETCH = "block_fetch"
    LOG_FETCH = "log_fetch"
    TRACE_FETCH = "trace_fetch"
    OTHER = "other"


# Exact, case-sensitive names. Anything absent is presumed safe.
DANGEROUS_METHODS: Mapping[str, MethodRisk] = MappingProxyType(
    {
        "eth_getBlockByNumber": MethodRisk.BLOCK_FETCH,
        "eth_getBlockByHash": MethodRisk.BLOCK_FETCH,
        "eth_getLogs": MethodRisk.LOG_FETCH,
        # Receipts embed every log emitted by the transaction.
        "eth_getTransactionReceipt": MethodRisk.OTHER,
        "debug_traceTransaction": MethodRisk.TRACE_FETCH,
        "debug_traceBlockByNumber": MethodRisk.TRACE_FETCH,
        "debug_traceBlockByHash": MethodRisk.TRACE_FETCH,
        "trace_block": MethodRisk.TRACE_FETCH,
        "trace_transaction": MethodRisk.TRACE_FETCH,
        "trace_filter": MethodRisk.TRACE_FETCH,
        "trace_replayBlockTransactions": MethodRisk.TRACE_FETCH,
    }
)

BLOCK_FETCH_METHODS = frozenset(
    name for name, risk in DANGEROUS_METHODS.items() if risk is MethodRisk.BLOCK_FETCH
)


def method_risk(method: Optional[str]) -> Optional[MethodRisk]:
    """Return the risk kind for a dangerous method, or None when presumed safe."""
    if not isinstance(method, str):
        return None
    return DANGEROUS_METHODS.get(method)


def is_dangerous_method(method: Optional[str]) -> bool:
    return method_risk(method) is not None


def classify(method: Optional[str]) -> Dict[str, Any]:
    """Classify a method name as ``{"dangerous": bool, "risk": str | None}``."""
    risk = method_risk(method)
    return {"dangerous": risk is not None, "risk": risk.value if risk is not None else None}
