# mcp_playwright_server/decorators/__init__.py
#
# Re-exports decorators from their respective modules.

from .operation import operation, get_operation_marker
from .envelope import tool_envelope, success_envelope, failure_envelope

__all__ = [
    "operation",
    "get_operation_marker",
    "tool_envelope",
    "success_envelope",
    "failure_envelope",
]
