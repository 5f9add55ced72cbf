"""Core data model for the virtual file system and command results."""

from __future__ import annotations

import logging
import weakref
from dataclasses import dataclass
from enum import Enum
from typing import assert_never

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    """Recoverable, user-facing failure causes carried on results."""

    PATH_REQUIRED = "path_required"
    FILENAME_REQUIRED = "filename_required"
    USAGE_ERROR = "usage_error"
    NO_SUCH_PATH = "no_such_path"
    NO_SUCH_FILE = "no_such_file"
    NOT_FOUND = "not_found"
    NOT_A_DIRECTORY = "not_a_directory"
    IS_A_DIRECTORY = "is_a_directory"
    CANNOT_COPY_DIRECTORY = "cannot_copy_directory"
    CANNOT_OVERWRITE_DIRECTORY = "cannot_overwrite_directory"
    COMMAND_NOT_FOUND = "command_not_found"
    BLOCKED = "blocked"
    NOT_ALLOWED = "not_allowed"
    NAME_CONFLICT = "name_conflict"
    INTERNAL = "internal"


class VFSError(Exception):
    """Failure raised by tree operations and converted to a result by the interpreter."""

    def __init__(self, kind: ErrorKind, message: str, node: Node | None = None) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.node = node


class _NodeBase:
    """Name and parent back-link shared by files and directories."""

    def __init__(self, name: str) -> None:
        self._name = name
        self._parent: weakref.ReferenceType[Directory] | None = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def key(self) -> str:
        """Lookup key used in the parent's child mapping."""
        return self._name.lower()

    @property
    def parent(self) -> Directory | None:
        if self._parent is None:
            return None
        return self._parent()


class File(_NodeBase):
    """A text file node."""

    __match_args__ = ("name", "content")

    def __init__(self, name: str, content: str = "") -> None:
        super().__init__(name)
        self.content = content

    def __repr__(self) -> str:
        return f"File({self._name!r})"


class Directory(_NodeBase):
    """A directory node owning its children, keyed by lowercased name."""

    __match_args__ = ("name",)

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.children: dict[str, Node] = {}

    def __repr__(self) -> str:
        return f"Directory({self._name!r})"

    def get(self, name: str) -> Node | None:
        """Return a child by case-insensitive name."""
        return self.children.get(name.lower())

    def add(self, node: Node) -> Node:
        """Attach a detached child; a name collision is rejected and the existing child kept."""
        if node.parent is not None:
            raise ValueError(f"Node '{node.name}' is already attached to '{node.parent.name}'.")
        ancestor: Directory | None = self
        while ancestor is not None:
            if ancestor is node:
                raise ValueError(f"Directory '{node.name}' cannot be placed inside itself or a descendant.")
            ancestor = ancestor.parent
        if node.key in self.children:
            logger.warning("A node named '%s' already exists in '%s'.", node.name, self.name)
            raise VFSError(ErrorKind.NAME_CONFLICT, f"already exists: {node.name}", self.children[node.key])
        node._parent = weakref.ref(self)  # noqa: SLF001
        self.children[node.key] = node
        return node

    def remove(self, name: str) -> Node | None:
        """Detach and return a child, or None when absent."""
        node = self.children.pop(name.lower(), None)
        if node is not None:
            node._parent = None  # noqa: SLF001
        return node

    def sorted_children(self) -> list[Node]:
        """Return children ordered by name, ignoring case."""
        return sorted(self.children.values(), key=lambda item: (item.name.lower(), item.name))


Node = File | Directory


def display_name(node: Node) -> str:
    """Return the listing name of a node (directories suffixed with '/')."""
    match node:
        case Directory():
            return f"{node.name}/"
        case File():
            return node.name
        case _:
            assert_never(node)


@dataclass(frozen=True)
class CommandResult:
    """Immutable outcome of processing one input line."""

    console_output: str = ""
    vfs_nodes: tuple[Node, ...] = ()
    is_error: bool = False
    command_executed: str = ""
    target_node: Node | None = None
    error_kind: ErrorKind | None = None

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        message: str,
        command: str,
        target_node: Node | None = None,
    ) -> CommandResult:
        """Build an error result tagged with the command that produced it."""
        return cls(
            console_output=message,
            is_error=True,
            command_executed=command,
            target_node=target_node,
            error_kind=kind,
        )
