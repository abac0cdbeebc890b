"""
Standard HTTP response helpers for consistent API responses.
"""

import dataclasses
import json
from decimal import Decimal
from typing import Any, Optional, Dict, List, Union
import azure.functions as func


def json_serialize(obj: Any) -> str:
    """
    Serialize object to JSON, handling Decimal and dataclass types.
    
    Decimals are written as JSON numbers. Prices are numeric(10,2), at most
    15 significant digits, so the float's shortest repr reproduces them
    digit for digit.
    """
    def default_serializer(o):
        if isinstance(o, Decimal):
            return float(o)
        if dataclasses.is_dataclass(o) and not isinstance(o, type):
            return o.to_dict() if hasattr(o, "to_dict") else dataclasses.asdict(o)
        raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")
    
    return json.dumps(obj, default=default_serializer)


def success_response(
    data: Union[Dict, List, Any],
    status_code: int = 200,
    headers: Optional[Dict[str, str]] = None
) -> func.HttpResponse:
    """
    Create a successful JSON response.
    
    Args:
        data: Response data to serialize
        status_code: HTTP status code (default: 200)
        headers: Optional additional headers
        
    Returns:
        Azure Functions HttpResponse
    """
    response_headers = {
        "Content-Type": "application/json",
        **(headers or {})
    }
    
    return func.HttpResponse(
        json_serialize(data),
        status_code=status_code,
        mimetype="application/json",
        headers=response_headers
    )


def status_response(status_code: int = 200) -> func.HttpResponse:
    """
    Create a response that carries only a status code.
    
    Returns:
        Azure Functions HttpResponse with an empty body
    """
    return func.HttpResponse(
        status_code=status_code
    )


def error_response(
    message: str,
    status_code: int = 400,
    errors: Optional[List[Dict]] = None,
    headers: Optional[Dict[str, str]] = None
) -> func.HttpResponse:
    """
    Create an error JSON response.
    
    Args:
        message: Error message
        status_code: HTTP status code (default: 400)
        errors: Optional list of detailed errors
        headers: Optional additional headers
        
    Returns:
        Azure Functions HttpResponse with error details
    """
    error_body = {
        "error": True,
        "message": message,
    }
    
    if errors:
        error_body["errors"] = errors
    
    response_headers = {
        "Content-Type": "application/json",
        **(headers or {})
    }
    
    return func.HttpResponse(
        json_serialize(error_body),
        status_code=status_code,
        mimetype="application/json",
        headers=response_headers
    )


def not_found_response(
    resource: str = "Resource",
    message: Optional[str] = None
) -> func.HttpResponse:
    """
    Create a 404 Not Found response.
    
    Args:
        resource: Name of the resource that wasn't found
        message: Optional custom message
        
    Returns:
        Azure Functions HttpResponse with 404 status
    """
    return error_response(
        message or f"{resource} not found",
        status_code=404
    )


def validation_error_response(
    errors: List[Dict[str, Any]],
    message: str = "Validation failed"
) -> func.HttpResponse:
    """
    Create a 422 Validation Error response.
    
    Args:
        errors: List of validation errors
        message: Overall error message
        
    Returns:
        Azure Functions HttpResponse with 422 status
    """
    return error_response(message, status_code=422, errors=errors)


def internal_error_response(
    message: str = "Internal server error"
) -> func.HttpResponse:
    """
    Create a 500 Internal Server Error response.
    
    Args:
        message: Error message
        
    Returns:
        Azure Functions HttpResponse with 500 status
    """
    return error_response(message, status_code=500)
