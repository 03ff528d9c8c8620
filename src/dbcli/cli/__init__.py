"""dbcli - command-line client.

All commands emit structured JSON to stdout for reliable parsing.
"""

from dbcli.cli.config import CLIContext, create_context
from dbcli.cli.logging import (
    CLILogContext,
    cli_command,
    get_cli_logger,
    get_request_id,
    set_request_id,
)
from dbcli.cli.main import cli
from dbcli.cli.output import emit, emit_error, emit_success
from dbcli.cli.registry import get_context, set_context
from dbcli.cli.resilience import handle_keyboard_interrupt

__all__ = [
    # Entry point
    "cli",
    # Context
    "CLIContext",
    "create_context",
    "get_context",
    "set_context",
    # Output
    "emit",
    "emit_error",
    "emit_success",
    # Logging
    "CLILogContext",
    "cli_command",
    "get_cli_logger",
    "get_request_id",
    "set_request_id",
    # Resilience
    "handle_keyboard_interrupt",
]
