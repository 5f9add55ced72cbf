"""Headless presentation subscribers: console transcript and scene objects."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .models import CommandResult, Directory, Node

PrintFn = Callable[[str], None]


@dataclass(frozen=True)
class ConsoleLine:
    """One rendered block of console output."""

    text: str
    is_error: bool


class ConsoleView:
    """Render result output and keep a transcript of what was shown."""

    def __init__(self, print_fn: PrintFn | None = None, error_prefix: str = "") -> None:
        self.print_fn = print_fn
        self.error_prefix = error_prefix
        self.transcript: list[ConsoleLine] = []

    def __call__(self, result: CommandResult) -> None:
        text = result.console_output
        if text.endswith("\n"):
            text = text[:-1]
        if not text:
            return
        self.transcript.append(ConsoleLine(text=text, is_error=result.is_error))
        if self.print_fn is not None:
            self.print_fn(f"{self.error_prefix}{text}" if result.is_error else text)


@dataclass
class SceneObject:
    """Presentation state for one node of the staged directory."""

    node: Node
    visible: bool = False
    revealed: bool = False


class SceneView:
    """Track which nodes of the current directory are staged, shown and revealed.

    Objects are matched to nodes by identity, since names can repeat across
    directories.
    """

    def __init__(self, directory: Directory | None = None) -> None:
        self.objects: list[SceneObject] = []
        self.directory: Directory | None = None
        if directory is not None:
            self.set_stage(directory)

    def __call__(self, result: CommandResult) -> None:
        if result.is_error:
            return
        if result.command_executed == "cd" and isinstance(result.target_node, Directory):
            self.set_stage(result.target_node)
        elif result.command_executed == "ls":
            self.show(result.vfs_nodes)
        elif result.command_executed == "cat" and result.target_node is not None:
            item = self.find(result.target_node)
            if item is not None:
                item.revealed = True

    def set_stage(self, directory: Directory) -> None:
        """Replace every object with hidden objects for ``directory``'s children."""
        self.directory = directory
        self.objects = [SceneObject(node=node) for node in directory.sorted_children()]

    def show(self, nodes: tuple[Node, ...]) -> None:
        """Make visible every staged object whose node is listed."""
        for node in nodes:
            item = self.find(node)
            if item is not None:
                item.visible = True

    def find(self, node: Node) -> SceneObject | None:
        for item in self.objects:
            if item.node is node:
                return item
        return None

    def visible_names(self) -> list[str]:
        return [item.node.name for item in self.objects if item.visible]
