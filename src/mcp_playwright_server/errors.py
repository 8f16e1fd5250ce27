"""
Error taxonomy for the operation registry and the automation session.

Only CatalogConfigurationError is meant to escape to the caller of
build_catalog(); everything else is raised inside an invocation and turned
into a failure envelope at the Dispatcher boundary.
"""

from typing import Optional


class McpPlaywrightError(Exception):
    """Base class for errors raised by this package."""


class CatalogConfigurationError(McpPlaywrightError):
    """Malformed operation signature or duplicate name. Fatal at startup."""


class OperationNotFound(McpPlaywrightError, LookupError):
    def __init__(self, name: str):
        super().__init__(f"{name} not found")
        self.name = name


class ArgumentCoercionError(McpPlaywrightError, ValueError):
    """Raised when raw JSON arguments cannot be bound to an operation."""

    def __init__(self, message: str, parameter: Optional[str] = None):
        super().__init__(message)
        self.parameter = parameter


class MissingArgumentError(ArgumentCoercionError):
    def __init__(self, parameter: str):
        super().__init__(f'Missing required argument "{parameter}"', parameter)


class ArgumentTypeError(ArgumentCoercionError):
    def __init__(self, parameter: str, type_name: str):
        article = "an" if type_name[:1] in "aeiou" else "a"
        super().__init__(f"{parameter} must be {article} {type_name}", parameter)
        self.type_name = type_name


class SessionNotReadyError(McpPlaywrightError):
    """The session could not hand out a page or context."""


class EngineOperationError(McpPlaywrightError):
    """A call into the automation engine failed in a way we detected ourselves."""


class TabIndexError(McpPlaywrightError, IndexError):
    def __init__(self, index: int, count: int):
        super().__init__(f"Tab index {index} out of range (open tabs: {count})")
        self.index = index
        self.count = count


class InvalidTabStateError(McpPlaywrightError):
    pass


class OperationCancelled(McpPlaywrightError):
    """The caller cancelled an operation that was waiting on the page."""


class OperationFailed(McpPlaywrightError):
    """Failure envelope re-raised at the MCP boundary so the client sees an error result."""


__all__ = [
    "McpPlaywrightError",
    "CatalogConfigurationError",
    "OperationNotFound",
    "ArgumentCoercionError",
    "MissingArgumentError",
    "ArgumentTypeError",
    "SessionNotReadyError",
    "EngineOperationError",
    "TabIndexError",
    "InvalidTabStateError",
    "OperationCancelled",
    "OperationFailed",
]
