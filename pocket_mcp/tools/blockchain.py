"""Service catalog, free-text query and direct RPC tools."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pocket_mcp.config import PocketConfig, SafetyConfig, default_config
from pocket_mcp.pocket_api import (
    NodeUnreachableError,
    PocketApiError,
    RateLimitedError,
    RpcError,
    UnauthorizedError,
    default_client,
    find_service,
    services_by_category,
    supported_methods,
)
from pocket_mcp.pocket_api.services import CATEGORIES
from pocket_mcp.safety import (
    SAFE_ALTERNATIVES,
    classify,
    estimate_response_size,
    is_dangerous_method,
    validate_call,
    validate_natural_language_query,
)
from pocket_mcp.tools.gate import blocked_response, record_estimate, rpc_error_message
from pocket_mcp.tools.interpreter import interpret_query
from pocket_mcp.tools.validators import clamp_limit, normalize_network

logger = logging.getLogger(__name__)


def _service_not_found(blockchain: Any, network: str) -> Dict[str, str]:
    return {"error": f"Blockchain service not found: {blockchain} ({network})"}


async def query_blockchain(
    query: Any,
    *,
    client=default_client,
    config: PocketConfig = default_config,
    safety_config: Optional[SafetyConfig] = None,
) -> Dict[str, Any]:
    """
    Execute a natural-language query such as "get the latest height for ethereum".

    The text is screened for history-style and unbounded requests before it is
    interpreted; a blocked query never reaches the gateway.
    """
    if not isinstance(query, str) or not query.strip():
        return {"error": "Query is required."}

    verdict = validate_natural_language_query(query, safety_config or config.safety)
    if not verdict.safe:
        return blocked_response("QUERY", verdict, tool="query_blockchain")

    plan = interpret_query(query)
    if plan is None:
        return {
            "error": "Could not interpret query. Name a blockchain and ask for its block height, "
            "gas price, chain id, or the balance of an address."
        }

    rpc_verdict = validate_call(plan.service.blockchain, plan.method, plan.params, safety_config or config.safety)
    if not rpc_verdict.safe:
        return blocked_response("QUERY", rpc_verdict, tool="query_blockchain")

    record_estimate("query_blockchain", plan.method, plan.params)
    try:
        result = await client.call_rpc(plan.service, plan.method, plan.params)
    except UnauthorizedError:
        return {"error": "Unauthorized or API key required."}
    except NodeUnreachableError:
        return {"error": "Node unreachable"}
    except RateLimitedError:
        return {"error": "Gateway rate limit exceeded."}
    except RpcError as exc:
        return {"error": rpc_error_message(exc)}
    except PocketApiError:
        return {"error": "Pocket API error."}
    except Exception:
        logger.exception("Unexpected error executing query via %s", plan.method)
        return {"error": "Unexpected error while executing query."}

    return {
        "blockchain": plan.service.blockchain,
        "network": plan.service.network,
        "service": plan.service.id,
        "intent": plan.intent,
        "method": plan.method,
        "result": result,
    }


def list_blockchain_services(
    category: Optional[str] = None,
    *,
    limit: Optional[int] = None,
    config: PocketConfig = default_config,
) -> Dict[str, Any]:
    """List available services, optionally filtered by category (evm, layer2, non-evm)."""
    if category is not None:
        if not isinstance(category, str) or category.strip().lower() not in CATEGORIES:
            return {"error": f"Invalid category. Expected one of: {', '.join(CATEGORIES)}."}
    services = services_by_category(category)
    effective_limit = clamp_limit(limit, default=config.max_services, max_value=config.max_services)
    return {
        "count": len(services),
        "services": [service.to_dict(config) for service in services[:effective_limit]],
    }


def get_blockchain_service(
    blockchain: Any,
    network: Optional[str] = None,
    *,
    config: PocketConfig = default_config,
) -> Dict[str, Any]:
    normalized_network = normalize_network(network)
    if normalized_network is None:
        return {"error": "Invalid network. Use mainnet or testnet."}
    service = find_service(blockchain, normalized_network)
    if service is None:
        return _service_not_found(blockchain, normalized_network)
    details = service.to_dict(config)
    details["methods"] = supported_methods(service)
    return details


def get_supported_methods(
    blockchain: Any,
    network: Optional[str] = None,
) -> Dict[str, Any]:
    """Return supported RPC methods, flagging those the safety gate inspects or blocks."""
    normalized_network = normalize_network(network)
    if normalized_network is None:
        return {"error": "Invalid network. Use mainnet or testnet."}
    service = find_service(blockchain, normalized_network)
    if service is None:
        return _service_not_found(blockchain, normalized_network)
    methods = supported_methods(service)
    return {
        "service": service.id,
        "protocol": service.protocol,
        "methods": methods,
        "gatedMethods": [method for method in methods if is_dangerous_method(method)],
    }


async def call_rpc_method(
    blockchain: Any,
    method: Any,
    params: Optional[List[Any]] = None,
    network: Optional[str] = None,
    *,
    client=default_client,
    config: PocketConfig = default_config,
    safety_config: Optional[SafetyConfig] = None,
) -> Dict[str, Any]:
    """
    Call a JSON-RPC method on a blockchain service.

    Args:
        blockchain: Chain name, service id or alias.
        method: Exact RPC method name.
        params: Positional parameters (defaults to an empty list).
        network: mainnet (default) or testnet.
        client: Pocket API client (override for testing).
        config: Runtime configuration.
        safety_config: Per-call safety ceilings; defaults to ``config.safety``.

    Returns:
        ``{"blockchain", "network", "service", "method", "result"}`` or an error dict.
    """
    if not isinstance(method, str) or not method.strip():
        return {"error": "Method is required."}
    if params is None:
        params = []
    if not isinstance(params, list):
        return {"error": "Params must be an array."}

    verdict = validate_call(blockchain, method, params, safety_config or config.safety)
    if not verdict.safe:
        return blocked_response("RPC CALL", verdict, tool="call_rpc_method")

    normalized_network = normalize_network(network)
    if normalized_network is None:
        return {"error": "Invalid network. Use mainnet or testnet."}
    service = find_service(blockchain, normalized_network)
    if service is None:
        return _service_not_found(blockchain, normalized_network)

    record_estimate("call_rpc_method", method, params)
    try:
        result = await client.call_rpc(service, method, params)
    except UnauthorizedError:
        return {"error": "Unauthorized or API key required."}
    except NodeUnreachableError:
        return {"error": "Node unreachable"}
    except RateLimitedError:
        return {"error": "Gateway rate limit exceeded."}
    except RpcError as exc:
        return {"error": rpc_error_message(exc)}
    except PocketApiError:
        return {"error": "Pocket API error."}
    except Exception:
        logger.exception("Unexpected error calling %s on %s", method, service.id)
        return {"error": "Unexpected error while calling RPC method."}

    return {
        "blockchain": service.blockchain,
        "network": service.network,
        "service": service.id,
        "method": method,
        "result": result,
    }


def check_query_safety(
    blockchain: Optional[str] = None,
    method: Optional[str] = None,
    params: Optional[List[Any]] = None,
    query: Optional[str] = None,
    *,
    config: PocketConfig = default_config,
    safety_config: Optional[SafetyConfig] = None,
) -> Dict[str, Any]:
    """Run the safety gate only, without contacting any chain."""
    effective = safety_config or config.safety
    if isinstance(method, str) and method.strip():
        if params is not None and not isinstance(params, list):
            return {"error": "Params must be an array."}
        verdict = validate_call(blockchain or "", method, params or [], effective)
        result = verdict.to_dict()
        result["classification"] = classify(method)
        result["estimatedResponseKB"] = estimate_response_size(method, params or [])
        return result
    if isinstance(query, str) and query.strip():
        return validate_natural_language_query(query, effective).to_dict()
    return {"error": "Provide a method or a query."}


def get_safe_alternatives() -> Dict[str, str]:
    return dict(SAFE_ALTERNATIVES)
