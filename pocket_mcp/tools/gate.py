"""Helpers shared by tools that run the safety gate before dispatch."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

from pocket_mcp.metrics import default_metrics
from pocket_mcp.safety import SafetyVerdict, estimate_response_size

logger = logging.getLogger(__name__)

BLOCKED_FOOTER = "This protection prevents session crashes from large responses."


def blocked_response(label: str, verdict: SafetyVerdict, *, tool: str) -> Dict[str, Any]:
    """
    Build the in-band payload returned instead of dispatching an unsafe call.

    The message carries the verdict's reason and suggestion verbatim so an agent
    can reformulate the request.
    """
    logger.warning(
        "tool=%s outcome=blocked reason=%s",
        tool,
        verdict.reason,
        extra={"tool": tool, "error": verdict.reason},
    )
    default_metrics.record_blocked(tool)
    message = (
        f"UNSAFE {label} BLOCKED\n\n"
        f"Reason: {verdict.reason}\n\n"
        f"Suggestion: {verdict.suggestion}\n\n"
        f"{BLOCKED_FOOTER}"
    )
    return {
        "error": message,
        "blocked": True,
        "reason": verdict.reason,
        "suggestion": verdict.suggestion,
    }


def record_estimate(tool: str, method: str, params: Optional[Sequence[Any]]) -> int:
    size_kb = estimate_response_size(method, params)
    logger.debug("tool=%s method=%s estimated_kb=%s", tool, method, size_kb, extra={"tool": tool, "method": method})
    default_metrics.record_estimated_size(tool, size_kb)
    return size_kb


def rpc_error_message(exc: Exception) -> str:
    message = str(exc) or "RPC error"
    return f"RPC error: {message}"
