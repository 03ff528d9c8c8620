"""JSON output helpers for dbcli.

Every command emits exactly one JSON envelope: success responses go to
stdout, error responses to stderr followed by exit code 1. The envelope
format comes from dbcli.core.responses.
"""

import json
import sys
from dataclasses import asdict
from typing import Any, Mapping, NoReturn

from dbcli.cli.logging import generate_request_id, get_request_id, set_request_id
from dbcli.core.responses import ErrorCode, ErrorType, error_response, success_response


def _ensure_request_id() -> str:
    request_id = get_request_id()
    if request_id:
        return request_id
    request_id = generate_request_id()
    set_request_id(request_id)
    return request_id


def emit(data: Any) -> None:
    """Emit minified JSON to stdout.

    Args:
        data: Any JSON-serializable data structure.
    """
    print(json.dumps(data, separators=(",", ":"), default=str))


def emit_error(
    message: str,
    code: ErrorCode | str = ErrorCode.INTERNAL_ERROR,
    *,
    error_type: ErrorType | str = ErrorType.INTERNAL,
    remediation: str | None = None,
    details: Mapping[str, Any] | None = None,
) -> NoReturn:
    """Emit error JSON to stderr and exit with code 1.

    Args:
        message: Human-readable error description.
        code: Error code in SCREAMING_SNAKE_CASE (e.g., NOT_FOUND).
        error_type: Error category for routing (not_found, internal, etc.).
        remediation: Actionable guidance for resolving the error.
        details: Optional additional error context.

    Raises:
        SystemExit: Always exits with code 1.
    """
    response = error_response(
        message=message,
        error_code=code,
        error_type=error_type,
        remediation=remediation,
        details=details,
        request_id=_ensure_request_id(),
    )
    print(json.dumps(asdict(response), separators=(",", ":"), default=str), file=sys.stderr)
    sys.exit(1)


def emit_success(data: Any) -> None:
    """Emit success response envelope to stdout.

    Args:
        data: The operation-specific payload; non-dict data is wrapped
            under a ``result`` key.
    """
    if not isinstance(data, dict):
        data = {"result": data}
    response = success_response(data=data, request_id=_ensure_request_id())
    emit(asdict(response))
