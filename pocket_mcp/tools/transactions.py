"""Transaction, block and log tools for EVM services."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from pocket_mcp.config import PocketConfig, SafetyConfig, default_config
from pocket_mcp.pocket_api import (
    BlockchainService,
    NodeUnreachableError,
    PocketApiError,
    RateLimitedError,
    RpcError,
    UnauthorizedError,
    default_client,
    find_service,
)
from pocket_mcp.safety import check_block_query, check_log_query
from pocket_mcp.tools.gate import blocked_response, record_estimate, rpc_error_message
from pocket_mcp.tools.validators import (
    is_valid_evm_address,
    is_valid_tx_hash,
    normalize_block_identifier,
    normalize_network,
)

logger = logging.getLogger(__name__)


def _resolve_evm_service(
    blockchain: Any, network: Optional[str]
) -> Tuple[Optional[BlockchainService], Optional[Dict[str, str]]]:
    normalized_network = normalize_network(network)
    if normalized_network is None:
        return None, {"error": "Invalid network. Use mainnet or testnet."}
    service = find_service(blockchain, normalized_network)
    if service is None:
        return None, {"error": f"Blockchain service not found: {blockchain} ({normalized_network})"}
    if service.protocol != "evm":
        return None, {"error": f"{service.name} is not an EVM chain; this tool supports EVM services only."}
    return service, None


def _wrap(service: BlockchainService, result: Any) -> Dict[str, Any]:
    return {"blockchain": service.blockchain, "network": service.network, "service": service.id, "result": result}


async def get_transaction(
    blockchain: Any,
    tx_hash: Any,
    network: Optional[str] = None,
    *,
    client=default_client,
) -> Dict[str, Any]:
    if not is_valid_tx_hash(tx_hash):
        return {"error": "Invalid transaction hash."}
    service, error = _resolve_evm_service(blockchain, network)
    if error:
        return error
    try:
        result = await client.fetch_transaction(service, tx_hash.strip())
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
        logger.exception("Unexpected error fetching transaction %s", tx_hash)
        return {"error": "Unexpected error while retrieving transaction."}
    if result is None:
        return {"error": "Transaction not found."}
    return _wrap(service, result)


async def get_transaction_receipt(
    blockchain: Any,
    tx_hash: Any,
    network: Optional[str] = None,
    *,
    client=default_client,
) -> Dict[str, Any]:
    if not is_valid_tx_hash(tx_hash):
        return {"error": "Invalid transaction hash."}
    service, error = _resolve_evm_service(blockchain, network)
    if error:
        return error
    record_estimate("get_transaction_receipt", "eth_getTransactionReceipt", [tx_hash])
    try:
        result = await client.fetch_transaction_receipt(service, tx_hash.strip())
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
        logger.exception("Unexpected error fetching receipt %s", tx_hash)
        return {"error": "Unexpected error while retrieving transaction receipt."}
    if result is None:
        return {"error": "Transaction receipt not found."}
    return _wrap(service, result)


async def estimate_gas(
    blockchain: Any,
    transaction: Any,
    network: Optional[str] = None,
    *,
    client=default_client,
) -> Dict[str, Any]:
    if not isinstance(transaction, dict) or not transaction:
        return {"error": "Transaction object is required."}
    for field_name in ("from", "to"):
        value = transaction.get(field_name)
        if value is not None and not is_valid_evm_address(value):
            return {"error": f"Invalid '{field_name}' address."}
    service, error = _resolve_evm_service(blockchain, network)
    if error:
        return error
    try:
        result = await client.estimate_gas(service, transaction)
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
        logger.exception("Unexpected error estimating gas on %s", service.id)
        return {"error": "Unexpected error while estimating gas."}
    return _wrap(service, result)


async def get_block_details(
    blockchain: Any,
    block_number: Any,
    include_transactions: Any = False,
    network: Optional[str] = None,
    *,
    client=default_client,
    config: PocketConfig = default_config,
    safety_config: Optional[SafetyConfig] = None,
) -> Dict[str, Any]:
    """Fetch a block by number, tag or hash; full transaction lists are gated."""
    block_id = normalize_block_identifier(block_number)
    if block_id is None:
        return {"error": "Invalid block number."}

    verdict = check_block_query(
        "eth_getBlockByNumber", [block_id, include_transactions], safety_config or config.safety
    )
    if not verdict.safe:
        return blocked_response("BLOCK QUERY", verdict, tool="get_block_details")

    service, error = _resolve_evm_service(blockchain, network)
    if error:
        return error
    with_transactions = include_transactions is True
    record_estimate("get_block_details", "eth_getBlockByNumber", [block_id, with_transactions])
    try:
        result = await client.fetch_block(service, block_id, include_transactions=with_transactions)
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
        logger.exception("Unexpected error fetching block %s", block_id)
        return {"error": "Unexpected error while retrieving block."}
    if result is None:
        return {"error": "Block not found."}
    return _wrap(service, result)


async def search_logs(
    blockchain: Any,
    filter: Any,
    network: Optional[str] = None,
    *,
    client=default_client,
    config: PocketConfig = default_config,
    safety_config: Optional[SafetyConfig] = None,
) -> Dict[str, Any]:
    """Search event logs; the filter must be bounded and carry address or topics."""
    verdict = check_log_query([filter], safety_config or config.safety)
    if not verdict.safe:
        return blocked_response("LOG QUERY", verdict, tool="search_logs")

    rpc_filter = dict(filter)
    for bound in ("fromBlock", "toBlock"):
        if bound in rpc_filter and rpc_filter[bound] is not None:
            normalized = normalize_block_identifier(rpc_filter[bound])
            if normalized is None:
                return {"error": f"Invalid {bound}."}
            rpc_filter[bound] = normalized

    service, error = _resolve_evm_service(blockchain, network)
    if error:
        return error
    record_estimate("search_logs", "eth_getLogs", [rpc_filter])
    try:
        logs = await client.fetch_logs(service, rpc_filter)
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
        logger.exception("Unexpected error searching logs on %s", service.id)
        return {"error": "Unexpected error while searching logs."}
    return {**_wrap(service, logs), "count": len(logs)}
