"""Deterministic command registration primitives."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from dirdiff.errors import DirdiffError

CommandHandler = Callable[[dict[str, object]], dict[str, object]]


class CommandDispatchError(DirdiffError):
    """Raised when no handler is registered under a command name."""

    code = "UNKNOWN_COMMAND"


@dataclass(slots=True)
class CommandRegistry:
    """In-memory command registry preserving deterministic insertion order."""

    _handlers: dict[str, CommandHandler] = field(default_factory=dict)

    def register(self, name: str, handler: CommandHandler) -> None:
        """Register a named handler."""
        self._handlers[name] = handler

    def get(self, name: str) -> CommandHandler | None:
        """Return a handler by name."""
        return self._handlers.get(name)

    def names(self) -> tuple[str, ...]:
        """Return registered command names in deterministic order."""
        return tuple(self._handlers.keys())

    def dispatch(self, name: str, arguments: dict[str, object]) -> dict[str, object]:
        """Dispatch to a registered command by name."""
        handler = self.get(name)
        if handler is None:
            raise CommandDispatchError(
                reason=f"Unknown command: {name}",
                hint=f"Known commands: {', '.join(self.names()) or 'none'}",
            )
        return handler(arguments)
