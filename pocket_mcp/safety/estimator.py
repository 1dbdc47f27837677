"""Advisory response-size estimates (KB) for telemetry; never used for gating."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence

from pocket_mcp.safety.ranges import wants_transactions

DEFAULT_ESTIMATE_KB = 5
BLOCK_WITH_TRANSACTIONS_KB = 500
BLOCK_HEADER_KB = 5

STATIC_ESTIMATES_KB: Mapping[str, int] = MappingProxyType(
    {
        "eth_getLogs": 200,
        "eth_getTransactionReceipt": 10,
        "debug_traceTransaction": 1000,
        "debug_traceBlockByNumber": 2000,
        "debug_traceBlockByHash": 2000,
        "trace_transaction": 1000,
        "trace_block": 2000,
        "trace_filter": 2000,
        "trace_replayBlockTransactions": 2000,
    }
)


def estimate_response_size(method: str, params: Optional[Sequence[Any]] = None) -> int:
    """Conservative size guess in KB; unknown methods get a small default."""
    if method in ("eth_getBlockByNumber", "eth_getBlockByHash"):
        return BLOCK_WITH_TRANSACTIONS_KB if wants_transactions(params) else BLOCK_HEADER_KB
    return STATIC_ESTIMATES_KB.get(method, DEFAULT_ESTIMATE_KB)
