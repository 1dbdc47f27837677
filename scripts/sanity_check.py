"""Minimal sanity checks for the Pocket MCP tools against the live gateway."""

from __future__ import annotations

import asyncio
import os
import sys

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from pocket_mcp.tools import (  # noqa: E402
    call_rpc_method,
    check_query_safety,
    get_block_details,
    get_supported_methods,
    list_blockchain_services,
    query_blockchain,
    search_logs,
)

SAMPLE_CHAIN = os.getenv("POCKET_SAMPLE_CHAIN", "ethereum")
# Opt-in to a bounded log search (needs a contract with recent activity).
SAMPLE_LOG_ADDRESS = os.getenv("POCKET_SAMPLE_LOG_ADDRESS")


async def main() -> None:
    print("Services (evm):", list_blockchain_services("evm", limit=5))
    print("Methods:", get_supported_methods(SAMPLE_CHAIN))

    print("Query:", await query_blockchain(f"get the latest height for {SAMPLE_CHAIN}"))
    print("Blocked query:", await query_blockchain("What was the last transaction on vitalik.eth?"))

    print("eth_blockNumber:", await call_rpc_method(SAMPLE_CHAIN, "eth_blockNumber"))
    print("Blocked trace:", await call_rpc_method(SAMPLE_CHAIN, "debug_traceTransaction", ["0x0"]))

    print("Latest block header:", await get_block_details(SAMPLE_CHAIN, "latest"))
    print("Blocked full block:", await get_block_details(SAMPLE_CHAIN, "latest", True))

    print("Dry run:", check_query_safety(method="eth_getLogs", params=[{"fromBlock": 1, "toBlock": 500}]))

    if SAMPLE_LOG_ADDRESS:
        height = await call_rpc_method(SAMPLE_CHAIN, "eth_blockNumber")
        latest = int(height.get("result", "0x0"), 16)
        print(
            "Logs:",
            await search_logs(
                SAMPLE_CHAIN,
                {"fromBlock": latest - 5, "toBlock": latest, "address": SAMPLE_LOG_ADDRESS},
            ),
        )


if __name__ == "__main__":
    asyncio.run(main())
