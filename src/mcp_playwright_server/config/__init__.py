"""Configuration management for the Playwright session."""

from .environment import (
    get_env_config,
    get_logging_config,
)

from .paths import (
    ensure_directories,
    resolve_output_path,
    default_trace_path,
)

__all__ = [
    "get_env_config",
    "get_logging_config",
    "ensure_directories",
    "resolve_output_path",
    "default_trace_path",
]
