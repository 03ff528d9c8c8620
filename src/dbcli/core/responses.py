"""
Standard response contracts for dbcli commands.

All command output follows a standard structure:

    {
        "success": bool,       # Required: operation success/failure
        "data": {...},         # Required: primary payload (empty dict on error)
        "error": str | null,   # Required: error message or null on success
        "meta": {              # Required: response metadata
            "version": "response-v2",
            "request_id": "cli_abc123"?
        }
    }

Error responses carry ``error_code`` and ``error_type`` inside ``data`` so
scripts can branch on them without parsing the message.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union


class ErrorCode(str, Enum):
    """Machine-readable error codes for command responses."""

    # Resource errors
    NOT_FOUND = "NOT_FOUND"
    CACHE_EXPIRED = "CACHE_EXPIRED"

    # System errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SETTINGS_ERROR = "SETTINGS_ERROR"


class ErrorType(str, Enum):
    """Error categories for routing and client-side handling."""

    NOT_FOUND = "not_found"
    INTERNAL = "internal"


@dataclass
class CommandResponse:
    """
    Standard response structure for CLI commands.

    Attributes:
        success: Whether the operation completed successfully
        data: The primary payload (operation-specific structured data)
        error: Error message if success is False, None otherwise
        meta: Response metadata including version identifier
    """

    success: bool
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=lambda: {"version": "response-v2"})


def _build_meta(*, request_id: Optional[str] = None) -> Dict[str, Any]:
    """Construct a metadata payload that always includes the response version."""
    meta: Dict[str, Any] = {"version": "response-v2"}
    if request_id:
        meta["request_id"] = request_id
    return meta


def success_response(
    data: Optional[Mapping[str, Any]] = None,
    *,
    request_id: Optional[str] = None,
    **fields: Any,
) -> CommandResponse:
    """Create a standardized success response.

    Args:
        data: Optional mapping used as the base payload.
        request_id: Correlation identifier propagated through logs.
        **fields: Additional payload fields (shorthand for ``data.update``).
    """
    payload: Dict[str, Any] = {}
    if data:
        payload.update(dict(data))
    if fields:
        payload.update(fields)

    return CommandResponse(
        success=True,
        data=payload,
        error=None,
        meta=_build_meta(request_id=request_id),
    )


def error_response(
    message: str,
    *,
    data: Optional[Mapping[str, Any]] = None,
    error_code: Optional[Union[ErrorCode, str]] = None,
    error_type: Optional[Union[ErrorType, str]] = None,
    remediation: Optional[str] = None,
    details: Optional[Mapping[str, Any]] = None,
    request_id: Optional[str] = None,
) -> CommandResponse:
    """Create a standardized error response.

    Args:
        message: Human-readable description of the failure.
        data: Optional mapping with additional machine-readable context.
        error_code: Canonical error code (``ErrorCode`` or string).
        error_type: Error category for routing (``ErrorType`` or string).
        remediation: User-facing guidance on how to fix the issue.
        details: Nested structure describing the failure.
        request_id: Correlation identifier propagated through logs.

    Example:
        >>> error_response(
        ...     "No cached value for database_names",
        ...     error_code=ErrorCode.NOT_FOUND,
        ...     error_type=ErrorType.NOT_FOUND,
        ... )
    """
    payload: Dict[str, Any] = {}
    if data:
        payload.update(dict(data))

    effective_error_code: Union[ErrorCode, str] = (
        error_code if error_code is not None else ErrorCode.INTERNAL_ERROR
    )
    effective_error_type: Union[ErrorType, str] = (
        error_type if error_type is not None else ErrorType.INTERNAL
    )

    if "error_code" not in payload:
        payload["error_code"] = (
            effective_error_code.value
            if isinstance(effective_error_code, Enum)
            else effective_error_code
        )
    if "error_type" not in payload:
        payload["error_type"] = (
            effective_error_type.value
            if isinstance(effective_error_type, Enum)
            else effective_error_type
        )
    if remediation is not None and "remediation" not in payload:
        payload["remediation"] = remediation
    if details and "details" not in payload:
        payload["details"] = dict(details)

    return CommandResponse(
        success=False,
        data=payload,
        error=message,
        meta=_build_meta(request_id=request_id),
    )
