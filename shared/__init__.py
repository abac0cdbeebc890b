# Shared utilities for the Products Backend
from .errors import NotFoundError, ExecutionError, ConfigurationError
from .settings import resolve_connection_string, get_setting, get_log_level, get_connect_timeout
from .responses import success_response, status_response, error_response, not_found_response, validation_error_response, internal_error_response

__all__ = [
    "NotFoundError",
    "ExecutionError",
    "ConfigurationError",
    "resolve_connection_string",
    "get_setting",
    "get_log_level",
    "get_connect_timeout",
    "success_response",
    "status_response",
    "error_response",
    "not_found_response",
    "validation_error_response",
    "internal_error_response",
]
