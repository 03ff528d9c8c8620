"""dbcli command groups."""

from dbcli.cli.commands.cache import cache

__all__ = [
    "cache",
]
