"""MCP wire protocol: JSON-RPC envelopes and request dispatch."""

from .messages import JsonRpcRequest, error_result, json_result, text_result

__all__ = ["JsonRpcRequest", "error_result", "json_result", "text_result"]
