"""
Lightweight JSON-RPC surface for MCP-style tooling.

This keeps a minimal, safe mapping of tool names to existing implementations.
It is intentionally small and stateless; caller must handle authentication to
the HTTP server hosting this adapter.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pocket_mcp.config import default_config
from pocket_mcp.pocket_api.services import CATEGORIES
from pocket_mcp.tools import (
    call_rpc_method,
    check_query_safety,
    estimate_gas,
    get_block_details,
    get_blockchain_service,
    get_safe_alternatives,
    get_supported_methods,
    get_transaction,
    get_transaction_receipt,
    list_blockchain_services,
    query_blockchain,
    search_logs,
)
from pocket_mcp.tools.validators import TX_HASH_REGEX


TX_HASH_PATTERN = TX_HASH_REGEX.pattern

NETWORK_SCHEMA: Dict[str, Any] = {
    "type": "string",
    "enum": ["mainnet", "testnet"],
    "description": "Network type (defaults to mainnet)",
}
BLOCKCHAIN_SCHEMA: Dict[str, Any] = {
    "type": "string",
    "description": "Blockchain name, service id or alias (e.g., ethereum, polygon, solana)",
    "minLength": 1,
}


def _tx_hash_schema() -> Dict[str, Any]:
    return {
        "type": "string",
        "description": "Transaction hash (0x-prefixed, 32 bytes)",
        "pattern": TX_HASH_PATTERN,
    }


ToolCallable = Callable[..., Awaitable[Any]] | Callable[..., Any]


@dataclass(slots=True)
class ToolDefinition:
    name: str
    description: str
    params: Dict[str, Any]
    input_schema: Dict[str, Any]
    callable: ToolCallable


TOOL_REGISTRY: Dict[str, ToolDefinition] = {
    "query_blockchain": ToolDefinition(
        name="query_blockchain",
        description=(
            "Execute a natural language query against blockchain data "
            '(e.g., "get the latest height for ethereum"). History and unbounded requests are refused.'
        ),
        params={"query": "string (required)"},
        input_schema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Natural language query describing what you want to do",
                    "minLength": 1,
                }
            },
            "required": ["query"],
            "additionalProperties": False,
        },
        callable=query_blockchain,
    ),
    "list_blockchain_services": ToolDefinition(
        name="list_blockchain_services",
        description="List blockchain services/networks available through Pocket Network.",
        params={"category": "string (optional)", "limit": "integer (optional)"},
        input_schema={
            "type": "object",
            "properties": {
                "category": {
                    "type": "string",
                    "enum": list(CATEGORIES),
                    "description": "Optional category filter",
                },
                "limit": {
                    "type": "integer",
                    "minimum": 0,
                    "maximum": default_config.max_services,
                    "description": f"Optional max items (0-{default_config.max_services})",
                },
            },
            "required": [],
            "additionalProperties": False,
        },
        callable=list_blockchain_services,
    ),
    "get_blockchain_service": ToolDefinition(
        name="get_blockchain_service",
        description="Get details about a blockchain service including supported RPC methods.",
        params={"blockchain": "string (required)", "network": "string (optional)"},
        input_schema={
            "type": "object",
            "properties": {"blockchain": BLOCKCHAIN_SCHEMA, "network": NETWORK_SCHEMA},
            "required": ["blockchain"],
            "additionalProperties": False,
        },
        callable=get_blockchain_service,
    ),
    "get_supported_methods": ToolDefinition(
        name="get_supported_methods",
        description="List supported RPC methods for a service, marking those gated by safety checks.",
        params={"blockchain": "string (required)", "network": "string (optional)"},
        input_schema={
            "type": "object",
            "properties": {"blockchain": BLOCKCHAIN_SCHEMA, "network": NETWORK_SCHEMA},
            "required": ["blockchain"],
            "additionalProperties": False,
        },
        callable=get_supported_methods,
    ),
    "call_rpc_method": ToolDefinition(
        name="call_rpc_method",
        description="Call a JSON-RPC method on a blockchain service. Methods with oversized responses are refused.",
        params={
            "blockchain": "string (required)",
            "method": "string (required)",
            "params": "array (optional)",
            "network": "string (optional)",
        },
        input_schema={
            "type": "object",
            "properties": {
                "blockchain": BLOCKCHAIN_SCHEMA,
                "method": {
                    "type": "string",
                    "description": "RPC method name (e.g., eth_blockNumber, eth_getBalance)",
                    "minLength": 1,
                },
                "params": {"type": "array", "description": "Positional parameters for the RPC method"},
                "network": NETWORK_SCHEMA,
            },
            "required": ["blockchain", "method"],
            "additionalProperties": False,
        },
        callable=call_rpc_method,
    ),
    "check_query_safety": ToolDefinition(
        name="check_query_safety",
        description="Dry-run the safety gate for an RPC call or a free-text query without contacting any chain.",
        params={
            "blockchain": "string (optional)",
            "method": "string (optional)",
            "params": "array (optional)",
            "query": "string (optional)",
        },
        input_schema={
            "type": "object",
            "properties": {
                "blockchain": {"type": "string"},
                "method": {"type": "string"},
                "params": {"type": "array"},
                "query": {"type": "string"},
            },
            "required": [],
            "anyOf": [
                {"required": ["method"]},
                {"required": ["query"]},
            ],
            "additionalProperties": False,
        },
        callable=check_query_safety,
    ),
    "get_safe_alternatives": ToolDefinition(
        name="get_safe_alternatives",
        description="Return recommended alternatives for common oversized queries.",
        params={},
        input_schema={
            "type": "object",
            "properties": {},
            "required": [],
            "additionalProperties": False,
        },
        callable=get_safe_alternatives,
    ),
    "get_transaction": ToolDefinition(
        name="get_transaction",
        description="Get transaction details by transaction hash (EVM).",
        params={"blockchain": "string (required)", "tx_hash": "string (required)", "network": "string (optional)"},
        input_schema={
            "type": "object",
            "properties": {"blockchain": BLOCKCHAIN_SCHEMA, "tx_hash": _tx_hash_schema(), "network": NETWORK_SCHEMA},
            "required": ["blockchain", "tx_hash"],
            "additionalProperties": False,
        },
        callable=get_transaction,
    ),
    "get_transaction_receipt": ToolDefinition(
        name="get_transaction_receipt",
        description="Get a transaction receipt with status, gas used, and logs (EVM).",
        params={"blockchain": "string (required)", "tx_hash": "string (required)", "network": "string (optional)"},
        input_schema={
            "type": "object",
            "properties": {"blockchain": BLOCKCHAIN_SCHEMA, "tx_hash": _tx_hash_schema(), "network": NETWORK_SCHEMA},
            "required": ["blockchain", "tx_hash"],
            "additionalProperties": False,
        },
        callable=get_transaction_receipt,
    ),
    "estimate_gas": ToolDefinition(
        name="estimate_gas",
        description="Estimate gas required for a transaction (EVM).",
        params={"blockchain": "string (required)", "transaction": "object (required)", "network": "string (optional)"},
        input_schema={
            "type": "object",
            "properties": {
                "blockchain": BLOCKCHAIN_SCHEMA,
                "transaction": {
                    "type": "object",
                    "description": "Transaction object with from, to, data, value, etc.",
                },
                "network": NETWORK_SCHEMA,
            },
            "required": ["blockchain", "transaction"],
            "additionalProperties": False,
        },
        callable=estimate_gas,
    ),
    "get_block_details": ToolDefinition(
        name="get_block_details",
        description="Get block information by number, tag or hash. Full transaction lists are refused.",
        params={
            "blockchain": "string (required)",
            "block_number": "integer or string (required)",
            "include_transactions": "boolean (optional, default false)",
            "network": "string (optional)",
        },
        input_schema={
            "type": "object",
            "properties": {
                "blockchain": BLOCKCHAIN_SCHEMA,
                "block_number": {
                    "type": ["integer", "string"],
                    "description": 'Block number, hash, or tag ("latest", "earliest", "pending")',
                },
                "include_transactions": {
                    "type": "boolean",
                    "description": "Include full transaction objects (default: false)",
                },
                "network": NETWORK_SCHEMA,
            },
            "required": ["blockchain", "block_number"],
            "additionalProperties": False,
        },
        callable=get_block_details,
    ),
    "search_logs": ToolDefinition(
        name="search_logs",
        description="Search event logs by address and topics over a small block range (EVM).",
        params={"blockchain": "string (required)", "filter": "object (required)", "network": "string (optional)"},
        input_schema={
            "type": "object",
            "properties": {
                "blockchain": BLOCKCHAIN_SCHEMA,
                "filter": {
                    "type": "object",
                    "description": "Log filter with fromBlock, toBlock, address, topics",
                    "properties": {
                        "fromBlock": {"type": ["integer", "string"]},
                        "toBlock": {"type": ["integer", "string"]},
                        "address": {"type": ["string", "array"]},
                        "topics": {"type": "array"},
                    },
                },
                "network": NETWORK_SCHEMA,
            },
            "required": ["blockchain", "filter"],
            "additionalProperties": False,
        },
        callable=search_logs,
    ),
}


def list_tools() -> List[Dict[str, Any]]:
    """Return a simple list of available tools."""
    return [
        {
            "name": tool.name,
            "description": tool.description,
            "params": tool.params,
            "inputSchema": tool.input_schema,
        }
        for tool in TOOL_REGISTRY.values()
    ]


async def call_tool(tool_name: str, params: Optional[Dict[str, Any]] = None) -> Any:
    """Dispatch to a tool by name."""
    params = params or {}
    tool = TOOL_REGISTRY.get(tool_name)
    if tool is None:
        return {"error": f"Unknown tool: {tool_name}"}

    # Only schema-declared arguments; injection hooks such as client/config stay internal.
    allowed = tool.input_schema.get("properties", {})
    if any(key not in allowed for key in params):
        return {"error": "Invalid parameters."}

    # Match parameters by name; tools already handle validation and error shaping.
    try:
        result = tool.callable(**params)
        if inspect.isawaitable(result):
            return await result
        return result
    except TypeError:
        return {"error": "Invalid parameters."}
    except Exception:
        return {"error": "Unexpected error while calling tool."}
