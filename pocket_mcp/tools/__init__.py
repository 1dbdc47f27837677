"""LLM-facing tool implementations."""

from .blockchain import (
    call_rpc_method,
    check_query_safety,
    get_blockchain_service,
    get_safe_alternatives,
    get_supported_methods,
    list_blockchain_services,
    query_blockchain,
)
from .transactions import (
    estimate_gas,
    get_block_details,
    get_transaction,
    get_transaction_receipt,
    search_logs,
)
from . import validators

__all__ = [
    "query_blockchain",
    "list_blockchain_services",
    "get_blockchain_service",
    "get_supported_methods",
    "call_rpc_method",
    "check_query_safety",
    "get_safe_alternatives",
    "get_transaction",
    "get_transaction_receipt",
    "estimate_gas",
    "get_block_details",
    "search_logs",
    "validators",
]
