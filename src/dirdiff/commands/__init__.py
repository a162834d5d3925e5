"""Command registration and built-in commands."""

from .builtin import register_builtin_commands
from .registry import CommandDispatchError, CommandHandler, CommandRegistry

__all__ = [
    "CommandDispatchError",
    "CommandHandler",
    "CommandRegistry",
    "register_builtin_commands",
]
