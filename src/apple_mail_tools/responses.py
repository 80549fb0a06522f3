"""Tool result envelopes: one JSON text payload, error flag on failure."""

import json
from typing import Any, Dict

from mcp.types import CallToolResult, TextContent


def _text_result(payload: Dict[str, Any], is_error: bool = False) -> CallToolResult:
    return CallToolResult(
        content=[TextContent(type="text", text=json.dumps(payload))],
        isError=is_error,
    )


def success_response(data: Dict[str, Any]) -> CallToolResult:
    return _text_result(data)


def error_response(message: str) -> CallToolResult:
    return _text_result({"error": message}, is_error=True)
