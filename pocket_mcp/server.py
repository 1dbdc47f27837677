"""FastAPI application wiring Pocket MCP tools to HTTP routes."""

from __future__ import annotations

import json
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import Body, FastAPI, Query, Request
from fastapi.responses import JSONResponse, Response

from pocket_mcp import mcp
from pocket_mcp.config import PocketConfig, default_config
from pocket_mcp.metrics import default_metrics
from pocket_mcp.pocket_api import default_client
from pocket_mcp.rate_limiter import PerKeyRateLimiter
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

LOG_EXTRA_FIELDS = ("tool", "request_id", "error", "blockchain", "method")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "message": record.getMessage(),
            "name": record.name,
        }
        for key in LOG_EXTRA_FIELDS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        return json.dumps(payload, default=str)


def configure_logging(config: PocketConfig = default_config) -> None:
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    if config.log_format.lower() == "json":
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
        logging.basicConfig(level=level, handlers=[handler])
    else:
        logging.basicConfig(level=level)


logger = logging.getLogger(__name__)
configure_logging()
rate_limiter = PerKeyRateLimiter(
    rate_per_sec=default_config.rate_limit_qps,
    per_tool=default_config.per_tool_rate_limits,
)
HEALTH_STATUS = {"status": "ok"}
APP_VERSION = "0.1.0"
MCP_SERVER_NAME = "pocket-mcp-server"
MCP_SERVER_VERSION = APP_VERSION


@asynccontextmanager
async def lifespan(_app: FastAPI):
    # Startup
    yield
    # Shutdown
    await default_client.aclose()


app = FastAPI(
    title="Pocket Network MCP Server",
    description="Blockchain tool surface for LLM agents with pre-execution response-size safety checks.",
    version=APP_VERSION,
    lifespan=lifespan,
)


@app.middleware("http")
async def add_request_context(request: Request, call_next):
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    start = time.time()
    default_metrics.incr_request()
    response = await call_next(request)
    duration_ms = (time.time() - start) * 1000
    default_metrics.record_duration(request_id, duration_ms)
    response.headers["X-Request-ID"] = request_id
    return response


def _log_tool_result(tool_name: str, result: Any, request_id: Optional[str] = None) -> None:
    if isinstance(result, dict) and result.get("blocked"):
        # Already counted and logged by the safety gate.
        logger.info(
            "tool=%s outcome=blocked request_id=%s",
            tool_name,
            request_id,
            extra={"tool": tool_name, "request_id": request_id},
        )
    elif isinstance(result, dict) and result.get("error"):
        logger.warning(
            "tool=%s outcome=error error=%s request_id=%s",
            tool_name,
            result.get("error"),
            request_id,
            extra={"tool": tool_name, "request_id": request_id, "error": result.get("error")},
        )
        default_metrics.record_tool(tool_name, success=False)
    else:
        logger.info(
            "tool=%s outcome=success request_id=%s",
            tool_name,
            request_id,
            extra={"tool": tool_name, "request_id": request_id},
        )
        default_metrics.record_tool(tool_name, success=True)


async def _enforce_rate_limit(tool_name: str) -> Optional[JSONResponse]:
    allowed = await rate_limiter.allow(tool_name)
    if not allowed:
        logger.warning("tool=%s outcome=rate_limited", tool_name, extra={"tool": tool_name})
        default_metrics.incr_rate_limited()
        # Return a JSON-RPC style error envelope for MCP clients.
        return JSONResponse(
            status_code=429,
            content={"jsonrpc": "2.0", "error": {"code": 429, "message": "Rate limit exceeded"}},
        )
    return None


@app.get("/health")
async def health() -> JSONResponse:
    """Lightweight health endpoint for monitoring."""
    return JSONResponse(content=HEALTH_STATUS)


@app.get("/metrics")
async def metrics() -> JSONResponse:
    """Return in-process metrics snapshot."""
    return JSONResponse(content=default_metrics.snapshot())


@app.get("/tools/services")
async def services_route(
    request: Request,
    category: str | None = None,
    limit: int | None = Query(None, ge=0),
) -> JSONResponse:
    """Proxy for list_blockchain_services tool."""
    limited = await _enforce_rate_limit("list_blockchain_services")
    if limited:
        return limited
    result = list_blockchain_services(category, limit=limit)
    request_id = getattr(request.state, "request_id", None)
    _log_tool_result("list_blockchain_services", result, request_id)
    return JSONResponse(content=result)


@app.get("/tools/service/{blockchain}")
async def service_route(blockchain: str, request: Request, network: str | None = None) -> JSONResponse:
    """Proxy for get_blockchain_service tool."""
    limited = await _enforce_rate_limit("get_blockchain_service")
    if limited:
        return limited
    result = get_blockchain_service(blockchain, network)
    request_id = getattr(request.state, "request_id", None)
    _log_tool_result("get_blockchain_service", result, request_id)
    return JSONResponse(content=result)


@app.get("/tools/methods/{blockchain}")
async def methods_route(blockchain: str, request: Request, network: str | None = None) -> JSONResponse:
    """Proxy for get_supported_methods tool."""
    limited = await _enforce_rate_limit("get_supported_methods")
    if limited:
        return limited
    result = get_supported_methods(blockchain, network)
    request_id = getattr(request.state, "request_id", None)
    _log_tool_result("get_supported_methods", result, request_id)
    return JSONResponse(content=result)


@app.get("/tools/query")
async def query_route(request: Request, q: str | None = None) -> JSONResponse:
    """Proxy for query_blockchain tool."""
    limited = await _enforce_rate_limit("query_blockchain")
    if limited:
        return limited
    result = await query_blockchain(q or "")
    request_id = getattr(request.state, "request_id", None)
    _log_tool_result("query_blockchain", result, request_id)
    return JSONResponse(content=result)


@app.post("/tools/rpc")
async def rpc_route(
    request: Request,
    blockchain: str = Body(...),
    method: str = Body(...),
    params: List[Any] | None = Body(None),
    network: str | None = Body(None),
) -> JSONResponse:
    """Proxy for call_rpc_method tool."""
    limited = await _enforce_rate_limit("call_rpc_method")
    if limited:
        return limited
    result = await call_rpc_method(blockchain, method, params, network)
    request_id = getattr(request.state, "request_id", None)
    _log_tool_result("call_rpc_method", result, request_id)
    return JSONResponse(content=result)


@app.get("/tools/transaction/{blockchain}/{tx_hash}")
async def transaction_route(
    blockchain: str, tx_hash: str, request: Request, network: str | None = None
) -> JSONResponse:
    """Proxy for get_transaction tool."""
    limited = await _enforce_rate_limit("get_transaction")
    if limited:
        return limited
    result = await get_transaction(blockchain, tx_hash, network)
    request_id = getattr(request.state, "request_id", None)
    _log_tool_result("get_transaction", result, request_id)
    return JSONResponse(content=result)


@app.get("/tools/receipt/{blockchain}/{tx_hash}")
async def receipt_route(
    blockchain: str, tx_hash: str, request: Request, network: str | None = None
) -> JSONResponse:
    """Proxy for get_transaction_receipt tool."""
    limited = await _enforce_rate_limit("get_transaction_receipt")
    if limited:
        return limited
    result = await get_transaction_receipt(blockchain, tx_hash, network)
    request_id = getattr(request.state, "request_id", None)
    _log_tool_result("get_transaction_receipt", result, request_id)
    return JSONResponse(content=result)


@app.post("/tools/estimate_gas")
async def estimate_gas_route(
    request: Request,
    blockchain: str = Body(...),
    transaction: Dict[str, Any] = Body(...),
    network: str | None = Body(None),
) -> JSONResponse:
    """Proxy for estimate_gas tool."""
    limited = await _enforce_rate_limit("estimate_gas")
    if limited:
        return limited
    result = await estimate_gas(blockchain, transaction, network)
    request_id = getattr(request.state, "request_id", None)
    _log_tool_result("estimate_gas", result, request_id)
    return JSONResponse(content=result)


@app.get("/tools/block/{blockchain}/{block_number}")
async def block_route(
    blockchain: str,
    block_number: str,
    request: Request,
    include_transactions: bool = Query(False),
    network: str | None = None,
) -> JSONResponse:
    """Proxy for get_block_details tool."""
    limited = await _enforce_rate_limit("get_block_details")
    if limited:
        return limited
    result = await get_block_details(blockchain, block_number, include_transactions, network)
    request_id = getattr(request.state, "request_id", None)
    _log_tool_result("get_block_details", result, request_id)
    return JSONResponse(content=result)


@app.post("/tools/logs")
async def logs_route(
    request: Request,
    blockchain: str = Body(...),
    filter: Dict[str, Any] = Body(...),
    network: str | None = Body(None),
) -> JSONResponse:
    """Proxy for search_logs tool."""
    limited = await _enforce_rate_limit("search_logs")
    if limited:
        return limited
    result = await search_logs(blockchain, filter, network)
    request_id = getattr(request.state, "request_id", None)
    _log_tool_result("search_logs", result, request_id)
    return JSONResponse(content=result)


@app.post("/safety/check")
async def safety_check_route(
    request: Request,
    blockchain: str | None = Body(None),
    method: str | None = Body(None),
    params: List[Any] | None = Body(None),
    query: str | None = Body(None),
) -> JSONResponse:
    """Proxy for check_query_safety tool."""
    limited = await _enforce_rate_limit("check_query_safety")
    if limited:
        return limited
    result = check_query_safety(blockchain, method, params, query)
    request_id = getattr(request.state, "request_id", None)
    _log_tool_result("check_query_safety", result, request_id)
    return JSONResponse(content=result)


@app.get("/safety/alternatives")
async def safety_alternatives_route(request: Request) -> JSONResponse:
    """Proxy for get_safe_alternatives tool."""
    result = get_safe_alternatives()
    request_id = getattr(request.state, "request_id", None)
    _log_tool_result("get_safe_alternatives", result, request_id)
    return JSONResponse(content=result)


@app.post("/mcp")
async def mcp_gateway(request: Request) -> JSONResponse:
    """
    Minimal JSON-RPC-like gateway for MCP-style integrations.

    Supported methods:
      - initialize
      - list_tools / tools/list
      - call_tool / tools/call
    """
    request_id = getattr(request.state, "request_id", None)
    start_time = time.time()

    def _respond(payload: Dict[str, Any], status_code: int = 200, *, outcome: str, method_label: Optional[str] = None, tool_label: Optional[str] = None, error_code: Optional[int] = None) -> JSONResponse:
        duration_ms = (time.time() - start_time) * 1000
        logger.debug(
            "mcp outcome=%s method=%s tool=%s id=%s status=%s duration_ms=%.2f error_code=%s",
            outcome,
            method_label,
            tool_label,
            payload.get("id"),
            status_code,
            duration_ms,
            error_code,
            extra={"request_id": request_id, "tool": tool_label, "error": error_code},
        )
        return JSONResponse(status_code=status_code, content=payload)

    try:
        body = await request.json()
    except Exception:
        payload = _jsonrpc_error_payload(None, -32700, "Parse error")
        return _respond(payload, status_code=400, outcome="error", method_label=None, error_code=-32700)

    if not isinstance(body, dict):
        payload = _jsonrpc_error_payload(None, -32600, "Invalid request")
        return _respond(payload, status_code=400, outcome="error", method_label=None, error_code=-32600)

    method = body.get("method")
    rpc_id = body.get("id")
    raw_params = body.get("params")
    if raw_params is None:
        params = {}
    elif isinstance(raw_params, dict):
        params = raw_params
    else:
        payload = _jsonrpc_error_payload(rpc_id, -32602, "Invalid params")
        return _respond(payload, outcome="error", method_label=method, error_code=-32602)

    if not method:
        payload = _jsonrpc_error_payload(rpc_id, -32600, "Invalid request")
        return _respond(payload, outcome="error", method_label=None, error_code=-32600)

    if method == "initialize":
        protocol_version = params.get("protocolVersion")
        if not isinstance(protocol_version, str) or not protocol_version:
            payload = _jsonrpc_error_payload(rpc_id, -32602, "Invalid params")
            return _respond(payload, outcome="error", method_label=method, error_code=-32602)

        logger.debug(
            "mcp initialize requested protocol=%s request_id=%s",
            protocol_version,
            request_id,
            extra={"request_id": request_id},
        )
        result = {
            "protocolVersion": protocol_version,
            "serverInfo": {"name": MCP_SERVER_NAME, "version": MCP_SERVER_VERSION},
            "capabilities": {"tools": {"listChanged": False}},
        }
        return _respond(_jsonrpc_success_payload(rpc_id, result), outcome="success", method_label=method)

    if method in ("list_tools", "tools/list"):
        limited = await _enforce_rate_limit("list_tools")
        if limited:
            return limited
        result = {"tools": mcp.list_tools()}
        return _respond(_jsonrpc_success_payload(rpc_id, result), outcome="success", method_label=method)

    if method in ("call_tool", "tools/call"):
        tool_name = params.get("tool") or params.get("name")
        tool_params = params.get("params")
        if tool_params is None:
            tool_params = params.get("arguments") or {}
        if not isinstance(tool_name, str) or not tool_name.strip():
            payload = _jsonrpc_error_payload(rpc_id, -32602, "Invalid params")
            return _respond(payload, outcome="error", method_label=method, tool_label=None, error_code=-32602)
        if not isinstance(tool_params, dict):
            payload = _jsonrpc_error_payload(rpc_id, -32602, "Invalid params")
            return _respond(payload, outcome="error", method_label=method, tool_label=tool_name, error_code=-32602)
        limited = await _enforce_rate_limit(tool_name)
        if limited:
            return limited
        result = await mcp.call_tool(tool_name, tool_params)
        _log_tool_result(tool_name, result, request_id)
        wrapped = _wrap_tool_result(result)
        outcome = "blocked" if isinstance(result, dict) and result.get("blocked") else "success"
        return _respond(
            _jsonrpc_success_payload(rpc_id, wrapped),
            outcome=outcome,
            method_label=method,
            tool_label=tool_name,
        )

    if method in ("notifications/initialized", "initialized"):
        # Notifications should not return a JSON-RPC response body.
        logger.debug(
            "mcp initialized notification received request_id=%s",
            request_id,
            extra={"request_id": request_id},
        )
        return Response(status_code=204)

    payload = _jsonrpc_error_payload(rpc_id, -32601, "Method not found")
    return _respond(payload, outcome="error", method_label=method, error_code=-32601)


# Run with: uvicorn pocket_mcp.server:app --reload


def _jsonrpc_success_payload(rpc_id: Any, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": rpc_id, "result": result}


def _jsonrpc_error_payload(rpc_id: Any, code: int, message: str) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": rpc_id, "error": {"code": code, "message": message}}


def _wrap_tool_result(result: Any) -> Dict[str, Any]:
    """
    Shape tool outputs into MCP-friendly content array.
    """
    # Tool-level errors (including safety refusals) are returned in-band with isError flag.
    if isinstance(result, dict) and "error" in result:
        message = result.get("error") or "Error"
        wrapped = {"content": [{"type": "text", "text": str(message)}], "isError": True}
        # Preserve structured error details for capable clients.
        wrapped["structuredContent"] = result
        return wrapped

    # Plain string results are returned directly as text.
    if isinstance(result, str):
        return {"content": [{"type": "text", "text": result}]}

    # For structured or primitive outputs, provide a text rendering plus structuredContent.
    try:
        text_repr = json.dumps(result, indent=2, ensure_ascii=True)
    except (TypeError, ValueError):
        text_repr = str(result)
    wrapped_result: Dict[str, Any] = {
        "content": [{"type": "text", "text": text_repr}],
        "structuredContent": result,
    }
    return wrapped_result
