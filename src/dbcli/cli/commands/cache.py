"""Cache management commands for dbcli.

Provides commands for inspecting and maintaining the API data cache kept
in the settings document. Expired entries stay in the document until they
are cleaned up, cleared, or overwritten.
"""

from typing import Any, NoReturn, Optional

import click

from dbcli.cli.config import CLIContext
from dbcli.cli.logging import cli_command, get_cli_logger
from dbcli.cli.output import emit_error, emit_success
from dbcli.cli.registry import get_context
from dbcli.cli.resilience import handle_keyboard_interrupt
from dbcli.core.cache import (
    CacheDecodeError,
    CacheEntry,
    CacheExpiredError,
    CacheInvalidationError,
    cache_key,
    cleanup_expired,
    clear_cache,
    get_cache,
    get_stats,
    invalidate_cache,
)
from dbcli.core.responses import ErrorCode, ErrorType
from dbcli.core.settings import SettingsDocument, SettingsError

logger = get_cli_logger()


def _settings_error(e: SettingsError, remediation: str) -> NoReturn:
    emit_error(
        str(e),
        code=ErrorCode.SETTINGS_ERROR,
        error_type=ErrorType.INTERNAL,
        remediation=remediation,
        details={"path": str(e.path) if e.path else None},
    )


def _open_settings(cli_ctx: CLIContext) -> SettingsDocument:
    try:
        return cli_ctx.settings
    except SettingsError as e:
        _settings_error(e, "Fix or remove the settings file and retry")


def _persist(cli_ctx: CLIContext) -> None:
    try:
        cli_ctx.flush()
    except SettingsError as e:
        _settings_error(e, "Check that the config directory is writable and retry")


def _disabled_payload(**extra: Any) -> dict:
    return {
        "enabled": False,
        "message": "Cache is disabled",
        "hint": "Unset DBCLI_CACHE_DISABLED to enable caching",
        **extra,
    }


@click.group("cache")
def cache() -> None:
    """Cached API data management."""
    pass


@cache.command("info")
@click.pass_context
@cli_command("info")
@handle_keyboard_interrupt
def cache_info_cmd(ctx: click.Context) -> None:
    """Show cache statistics.

    Displays the settings file location, entry counts, and the expiration
    of every cached key.
    """
    cli_ctx = get_context(ctx)
    if not cli_ctx.cache_enabled:
        emit_success(_disabled_payload())
        return

    settings = _open_settings(cli_ctx)
    stats = get_stats(settings)
    logger.debug("Cache stats collected", total_entries=stats["total_entries"])

    emit_success(
        {
            "enabled": True,
            "settings_file": str(settings.path) if settings.path else None,
            **stats,
        }
    )


@cache.command("show")
@click.argument("key")
@click.pass_context
@cli_command("show")
@handle_keyboard_interrupt
def cache_show_cmd(ctx: click.Context, key: str) -> None:
    """Show the cached value for KEY if it is still fresh."""
    cli_ctx = get_context(ctx)
    if not cli_ctx.cache_enabled:
        emit_success(_disabled_payload(key=key))
        return

    settings = _open_settings(cli_ctx)

    try:
        data = get_cache(settings, key, Any)
    except CacheExpiredError as e:
        emit_error(
            f"Cached value for {key} has expired",
            code=ErrorCode.CACHE_EXPIRED,
            error_type=ErrorType.NOT_FOUND,
            remediation=f"Run 'dbcli cache clear --key {key}' or refresh the data",
            details={"key": key, "expired": True, "expiration": e.expiration},
        )
    except CacheDecodeError:
        emit_error(
            f"No cached value for {key}",
            code=ErrorCode.NOT_FOUND,
            error_type=ErrorType.NOT_FOUND,
            details={"key": key, "expired": False},
        )

    entry = CacheEntry[Any].model_validate(settings.get(cache_key(key)))
    emit_success(
        {
            "key": key,
            "expiration": entry.expiration,
            "data": data,
        }
    )


@cache.command("clear")
@click.option("--key", "key", help="Only clear this cache key.")
@click.pass_context
@cli_command("clear")
@handle_keyboard_interrupt
def cache_clear_cmd(ctx: click.Context, key: Optional[str]) -> None:
    """Clear cache entries.

    Without --key, clears every cached entry, fresh or expired.
    """
    cli_ctx = get_context(ctx)
    if not cli_ctx.cache_enabled:
        emit_success(_disabled_payload(entries_deleted=0))
        return

    settings = _open_settings(cli_ctx)

    try:
        if key:
            deleted = 0 if settings.get(cache_key(key)) is None else 1
            invalidate_cache(settings, key)
        else:
            deleted = clear_cache(settings)
    except CacheInvalidationError as e:
        emit_error(str(e), code=ErrorCode.INTERNAL_ERROR, details={"key": e.key})

    _persist(cli_ctx)
    emit_success(
        {
            "entries_deleted": deleted,
            "filters": {"key": key} if key else None,
        }
    )


@cache.command("cleanup")
@click.pass_context
@cli_command("cleanup")
@handle_keyboard_interrupt
def cache_cleanup_cmd(ctx: click.Context) -> None:
    """Remove expired cache entries."""
    cli_ctx = get_context(ctx)
    if not cli_ctx.cache_enabled:
        emit_success(_disabled_payload(entries_removed=0))
        return

    settings = _open_settings(cli_ctx)

    try:
        removed = cleanup_expired(settings)
    except CacheInvalidationError as e:
        emit_error(str(e), code=ErrorCode.INTERNAL_ERROR, details={"key": e.key})

    _persist(cli_ctx)
    emit_success(
        {
            "entries_removed": removed,
            "message": f"Removed {removed} expired entries"
            if removed
            else "No expired entries found",
        }
    )
