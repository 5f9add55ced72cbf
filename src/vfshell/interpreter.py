"""Parse input lines, dispatch shell commands and publish their results."""

from __future__ import annotations

import logging
from collections.abc import Callable

from .events import EventBus
from .models import CommandResult, ErrorKind, VFSError, display_name
from .vfs import VirtualFileSystem

COPY_DESTINATION_ROLE = "bin"

Handler = Callable[[list[str]], CommandResult]

logger = logging.getLogger(__name__)


def parse_line(raw: str) -> tuple[str, list[str]]:
    """Split a line into a lowercased command name and positional arguments."""
    parts = raw.split()
    if not parts:
        return "", []
    return parts[0].lower(), parts[1:]


class CommandInterpreter:
    """Turns each input line into exactly one published ``CommandResult``."""

    def __init__(
        self,
        vfs: VirtualFileSystem,
        bus: EventBus,
        copy_destination_role: str = COPY_DESTINATION_ROLE,
    ) -> None:
        """Bind the interpreter to a tree and the bus it publishes on."""
        self.vfs = vfs
        self.bus = bus
        self.copy_destination_role = copy_destination_role
        self._handlers: dict[str, Handler] = {
            "echo": self._echo,
            "ls": self._ls,
            "cd": self._cd,
            "cat": self._cat,
            "pwd": self._pwd,
            "find": self._find,
            "cp": self._cp,
        }

    @property
    def commands(self) -> tuple[str, ...]:
        """Names of every command the interpreter understands."""
        return tuple(sorted(self._handlers))

    def process_line(self, raw: str) -> CommandResult:
        """Execute one line and broadcast its result."""
        result = self.execute(raw)
        self.bus.publish(result)
        return result

    def execute(self, raw: str) -> CommandResult:
        """Execute one line without publishing; never raises."""
        command, arguments = parse_line(raw)
        if not command:
            return CommandResult()

        handler = self._handlers.get(command)
        if handler is None:
            token = raw.split()[0]
            return CommandResult.failure(ErrorKind.COMMAND_NOT_FOUND, f"command not found: {token}", command)

        logger.debug("Dispatching %s %s", command, arguments)
        try:
            return handler(arguments)
        except VFSError as exc:
            return CommandResult.failure(exc.kind, exc.message, command)
        except Exception:
            logger.exception("Command '%s' failed unexpectedly.", command)
            return CommandResult.failure(ErrorKind.INTERNAL, f"internal error while running {command}", command)

    def _echo(self, arguments: list[str]) -> CommandResult:
        return CommandResult(" ".join(arguments), command_executed="echo")

    def _ls(self, arguments: list[str]) -> CommandResult:
        nodes = self.vfs.list_current()
        output = "\n".join(display_name(node) for node in nodes)
        return CommandResult(output, vfs_nodes=tuple(nodes), command_executed="ls")

    def _cd(self, arguments: list[str]) -> CommandResult:
        if not arguments:
            return CommandResult.failure(ErrorKind.PATH_REQUIRED, "path required", "cd")
        directory = self.vfs.change_directory(arguments[0])
        return CommandResult("", command_executed="cd", target_node=directory)

    def _cat(self, arguments: list[str]) -> CommandResult:
        if not arguments:
            return CommandResult.failure(ErrorKind.FILENAME_REQUIRED, "filename required", "cat")
        try:
            file = self.vfs.read_file(arguments[0])
        except VFSError as exc:
            if exc.kind is not ErrorKind.IS_A_DIRECTORY:
                raise
            return CommandResult.failure(exc.kind, exc.message, "cat", target_node=exc.node)
        return CommandResult(file.content, command_executed="cat", target_node=file)

    def _pwd(self, arguments: list[str]) -> CommandResult:
        return CommandResult(self.vfs.current_path(), command_executed="pwd")

    def _find(self, arguments: list[str]) -> CommandResult:
        if len(arguments) != 1:
            return CommandResult.failure(ErrorKind.USAGE_ERROR, "usage: find <name>", "find")
        path = self.vfs.find_by_name(arguments[0])
        if path is None:
            return CommandResult.failure(ErrorKind.NOT_FOUND, f"find: {arguments[0]}: not found", "find")
        return CommandResult(path, command_executed="find")

    def _cp(self, arguments: list[str]) -> CommandResult:
        if len(arguments) != 1:
            return CommandResult.failure(ErrorKind.USAGE_ERROR, "usage: cp <name>", "cp")
        destination = self.vfs.well_known(self.copy_destination_role)
        _, source = self.vfs.copy_to_directory(arguments[0], destination)
        return CommandResult("", command_executed="cp", target_node=source)
