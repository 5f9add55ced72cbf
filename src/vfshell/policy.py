"""Allow/block gate applied to input lines before they reach the interpreter."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .events import EventBus
from .interpreter import CommandInterpreter, parse_line
from .models import CommandResult, ErrorKind

logger = logging.getLogger(__name__)


class AccessPolicy:
    """Decide which commands are currently reachable.

    The block set holds command names or ``"command argument"`` patterns and
    wins over the allow set. Rejections are published on the same bus as
    interpreter results.
    """

    def __init__(
        self,
        interpreter: CommandInterpreter,
        bus: EventBus,
        allowed: Iterable[str] = (),
        blocked: Iterable[str] = (),
    ) -> None:
        self.interpreter = interpreter
        self.bus = bus
        self._allowed = {item.lower() for item in allowed if item}
        self._blocked = {item.lower() for item in blocked if item}

    @property
    def allowed(self) -> frozenset[str]:
        return frozenset(self._allowed)

    @property
    def blocked(self) -> frozenset[str]:
        return frozenset(self._blocked)

    def is_allowed(self, command: str) -> bool:
        """Return whether a bare command name would pass the gate."""
        lowered = command.lower()
        return lowered in self._allowed and lowered not in self._blocked

    def process_line(self, raw: str) -> CommandResult | None:
        """Check one line and forward it, publish a rejection, or ignore it if blank."""
        if not raw.strip():
            return None

        command, arguments = parse_line(raw)
        token = raw.split()[0]
        if command in self._blocked:
            return self._reject(ErrorKind.BLOCKED, f"Command '{token}' is currently blocked.", command)
        # Trailing slashes name the same target, as in change_directory.
        if arguments and f"{command} {(arguments[0].rstrip('/') or arguments[0]).lower()}" in self._blocked:
            return self._reject(ErrorKind.BLOCKED, f"Command execution blocked: {token} {arguments[0]}", command)
        if command not in self._allowed:
            return self._reject(ErrorKind.NOT_ALLOWED, f"command not found: {token}", command)

        return self.interpreter.process_line(raw)

    def allow(self, command: str) -> bool:
        """Add a command to the allow set; returns whether it was newly added."""
        return self._change(self._allowed, command, add=True, verb="unlocked")

    def disallow(self, command: str) -> bool:
        """Remove a command from the allow set; returns whether it was present."""
        return self._change(self._allowed, command, add=False, verb="locked")

    def block(self, pattern: str) -> bool:
        """Add a command or ``"command argument"`` pattern to the block set."""
        return self._change(self._blocked, pattern, add=True, verb="blocked")

    def unblock(self, pattern: str) -> bool:
        """Remove a command or pattern from the block set."""
        return self._change(self._blocked, pattern, add=False, verb="unblocked")

    def _change(self, entries: set[str], value: str, *, add: bool, verb: str) -> bool:
        lowered = " ".join(value.lower().split())
        if not lowered:
            return False
        if add == (lowered in entries):
            return False
        if add:
            entries.add(lowered)
        else:
            entries.remove(lowered)
        logger.info("Command %s: %s", verb, lowered)
        return True

    def _reject(self, kind: ErrorKind, message: str, command: str) -> CommandResult:
        result = CommandResult.failure(kind, message, command)
        self.bus.publish(result)
        return result
