"""Command registry for dbcli.

Centralized registration of all command groups.
"""

from typing import Optional

import click

from dbcli.cli.config import CLIContext

# Module-level storage for CLI context (for testing)
_cli_context: Optional[CLIContext] = None


def set_context(ctx: Optional[CLIContext]) -> None:
    """Set (or clear with None) the module-level CLI context.

    Primarily used for testing when not using Click's context.
    """
    global _cli_context
    _cli_context = ctx


def get_context(ctx: Optional[click.Context] = None) -> CLIContext:
    """Get CLI context from Click context or module-level storage.

    Args:
        ctx: Optional Click context with cli_context stored in obj.
             If None, returns module-level context.

    Raises:
        RuntimeError: If no context is available.
    """
    if ctx is not None:
        obj = ctx.find_object(dict)
        if obj is not None and "cli_context" in obj:
            return obj["cli_context"]

    if _cli_context is not None:
        return _cli_context

    raise RuntimeError("No CLI context available. Call set_context() first.")


def register_all_commands(cli: click.Group) -> None:
    """Register all command groups with the CLI.

    Args:
        cli: The main Click group to register commands with.
    """
    from dbcli.cli.commands import cache

    cli.add_command(cache)

    @cli.command("version")
    @click.pass_context
    def version(ctx: click.Context) -> None:
        """Show CLI version information."""
        from dbcli.cli.output import emit_success

        cli_ctx = get_context(ctx)
        emit_success(
            {
                "version": cli_ctx.config.version,
                "name": "dbcli",
                "config_dir": str(cli_ctx.config_dir),
            }
        )
