"""Interrupt handling for CLI commands."""

import sys
from functools import wraps
from typing import Any, Callable, TypeVar

__all__ = ["handle_keyboard_interrupt"]

T = TypeVar("T")


def handle_keyboard_interrupt(func: Callable[..., T]) -> Callable[..., T]:
    """Decorator to gracefully handle Ctrl+C in CLI commands.

    Catches KeyboardInterrupt and exits with code 130 (128 + SIGINT).
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            sys.exit(130)

    return wrapper
