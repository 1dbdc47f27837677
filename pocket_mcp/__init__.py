"""
Pocket Network MCP server package.

This package exposes LLM-friendly blockchain tools backed by the Pocket Network
gateway, with every call screened by a pre-execution query safety gate. See
DESIGN.md for full details.
"""

__all__ = ["config"]
