"""
Verdict assembly for direct RPC calls and free-text queries.

Every tool invocation that could reach a chain goes through one of these entry
points first. Non-dangerous methods take the fast path and their parameters are
never inspected; dangerous ones are routed to the validator for their risk kind.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence

from pocket_mcp.config import SafetyConfig, default_safety_config
from pocket_mcp.safety.classifier import MethodRisk, method_risk
from pocket_mcp.safety.intents import DEFAULT_INTENT_RULES, IntentRules, validate_query
from pocket_mcp.safety.ranges import check_block_query, check_log_query
from pocket_mcp.safety.verdict import SafetyVerdict

SAFE_ALTERNATIVES: Mapping[str, str] = MappingProxyType(
    {
        "get_last_transaction": "Use a block explorer API like Etherscan to fetch recent transactions for an address",
        "get_transaction_history": "Use etherscan.io API or similar indexing service",
        "get_all_logs": "Add specific address and topic filters, limit block range to < 10 blocks",
        "get_block_with_transactions": "Get block metadata only, then query specific transactions by hash",
    }
)


def validate_call(
    blockchain: str,
    method: str,
    params: Optional[Sequence[Any]] = None,
    config: SafetyConfig = default_safety_config,
) -> SafetyVerdict:
    """
    Decide whether a direct RPC call may be dispatched.

    Args:
        blockchain: Target chain identifier. Classification is by method name only.
        method: Exact RPC method name.
        params: Positional parameter list as it would be sent.
        config: Ceilings to validate against.

    Returns:
        Exactly one SafetyVerdict.
    """
    risk = method_risk(method)
    if risk is None:
        return SafetyVerdict.ok()

    params = params if isinstance(params, (list, tuple)) else []
    if risk is MethodRisk.BLOCK_FETCH:
        return check_block_query(method, params, config)
    if risk is MethodRisk.LOG_FETCH:
        return check_log_query(params, config)

    return SafetyVerdict.block(
        f"Method {method} can return extremely large responses",
        "Use safer alternatives or fetch data from a block explorer API",
    )


def validate_natural_language_query(
    query: str,
    config: SafetyConfig = default_safety_config,
    *,
    rules: IntentRules = DEFAULT_INTENT_RULES,
) -> SafetyVerdict:
    """Entry point for free-text queries."""
    return validate_query(query, config, rules=rules)
