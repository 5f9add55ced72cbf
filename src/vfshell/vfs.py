"""In-memory directory tree with a current-directory cursor."""

from __future__ import annotations

import logging
from collections import deque

from .models import Directory, ErrorKind, File, Node, VFSError

__all__ = ["VirtualFileSystem", "VFSError"]

logger = logging.getLogger(__name__)

ROOT_NAME = "/"
ROOT_ALIASES = {"", "~"}


class VirtualFileSystem:
    """Owns the node tree and resolves names relative to the current directory.

    All name comparisons ignore case; stored names keep their original case.
    Failures raise ``VFSError`` carrying an ``ErrorKind``.
    """

    def __init__(self) -> None:
        """Create an empty tree whose cursor sits at the root."""
        self.root = Directory(ROOT_NAME)
        self._current = self.root
        self._well_known: dict[str, Directory] = {}

    @property
    def current_directory(self) -> Directory:
        return self._current

    # Construction primitives, used while seeding a world.

    def create_directory(self, name: str, parent: Directory | None = None) -> Directory:
        """Create a directory under ``parent`` (root by default)."""
        directory = Directory(name)
        self.insert(directory, parent)
        return directory

    def create_file(self, name: str, content: str = "", parent: Directory | None = None) -> File:
        """Create a file under ``parent`` (root by default)."""
        file = File(name, content)
        self.insert(file, parent)
        return file

    def insert(self, node: Node, parent: Directory | None = None) -> Node:
        """Attach an existing node under ``parent`` (root by default)."""
        target = self.root if parent is None else parent
        return target.add(node)

    def register_well_known(self, role: str, directory: Directory) -> None:
        """Record a directory reachable by role rather than by navigation."""
        if not self.is_attached(directory):
            raise ValueError(f"Directory '{directory.name}' is not part of this tree.")
        self._well_known[role] = directory

    def well_known(self, role: str) -> Directory:
        """Return a well-known directory, checking it is still in the tree."""
        directory = self._well_known.get(role)
        if directory is None or not self.is_attached(directory):
            logger.error("Well-known directory '%s' is unavailable.", role)
            raise VFSError(ErrorKind.INTERNAL, f"internal error: '{role}' directory is unavailable")
        return directory

    # Queries and navigation.

    def resolve_child(self, name: str) -> Node | None:
        """Look up a child of the current directory, ignoring case."""
        return self._current.get(name)

    def resolve_absolute(self, path: str) -> Node | None:
        """Walk an absolute ``/a/b`` path from the root, ignoring case."""
        node: Node = self.root
        for segment in (part for part in path.split("/") if part):
            if not isinstance(node, Directory):
                return None
            child = node.get(segment)
            if child is None:
                return None
            node = child
        return node

    def change_directory(self, path: str) -> Directory:
        """Move the cursor to ``..``, ``/``, ``~`` or a direct child directory."""
        stripped = path.rstrip("/")
        if stripped in ROOT_ALIASES:
            target = self.root
        elif stripped == "..":
            # The root has no parent; moving up from it is a silent no-op.
            target = self._current.parent or self._current
        else:
            match self.resolve_child(stripped):
                case Directory() as directory:
                    target = directory
                case File() as file:
                    raise VFSError(ErrorKind.NOT_A_DIRECTORY, f"not a directory: {path}", file)
                case None:
                    raise VFSError(ErrorKind.NO_SUCH_PATH, f"no such file or directory: {path}")
        self._current = target
        logger.debug("cd -> %s", self.current_path())
        return target

    def read_file(self, name: str) -> File:
        """Return a file of the current directory."""
        match self.resolve_child(name):
            case File() as file:
                return file
            case Directory() as directory:
                raise VFSError(ErrorKind.IS_A_DIRECTORY, f"is a directory: {name}", directory)
            case None:
                raise VFSError(ErrorKind.NO_SUCH_FILE, f"no such file: {name}")

    def list_current(self) -> list[Node]:
        """Return the current directory's children sorted by name."""
        return self._current.sorted_children()

    def copy_to_directory(self, name: str, destination: Directory) -> tuple[File, File]:
        """Copy a file of the current directory into ``destination``.

        An existing file of the same name is replaced; an existing directory
        of the same name aborts the copy and leaves ``destination`` untouched.
        Copying a file onto itself leaves it in place. Returns ``(copy, source)``.
        """
        if not self.is_attached(destination):
            raise VFSError(ErrorKind.INTERNAL, f"internal error: '{destination.name}' is no longer in the tree")
        match self.resolve_child(name):
            case File() as source:
                pass
            case Directory() as directory:
                raise VFSError(ErrorKind.CANNOT_COPY_DIRECTORY, f"cp: cannot copy directory: {name}", directory)
            case None:
                raise VFSError(ErrorKind.NO_SUCH_FILE, f"cp: no such file: {name}")

        if destination.get(source.name) is source:
            return source, source

        match destination.get(source.name):
            case Directory() as existing:
                raise VFSError(
                    ErrorKind.CANNOT_OVERWRITE_DIRECTORY,
                    f"cp: cannot overwrite directory: {existing.name}",
                    existing,
                )
            case File() as existing:
                destination.remove(existing.name)
            case None:
                pass

        copy = File(source.name, source.content)
        destination.add(copy)
        return copy, source

    def find_by_name(self, name: str) -> str | None:
        """Return the path of the first node named ``name``, or None.

        The search is breadth-first from the root: shallower nodes win over
        deeper ones, and siblings are visited in listing order. The root
        itself never matches.
        """
        wanted = name.lower()
        queue: deque[Directory] = deque([self.root])
        while queue:
            directory = queue.popleft()
            for child in directory.sorted_children():
                if child.key == wanted:
                    return self.path_of(child)
                if isinstance(child, Directory):
                    queue.append(child)
        return None

    def current_path(self) -> str:
        """Return the absolute path of the current directory."""
        return "/" + "/".join(self._segments(self._current))

    def path_of(self, node: Node) -> str:
        """Return the absolute path of a node; directories end with '/'."""
        if node is self.root:
            return "/"
        path = "/" + "/".join(self._segments(node))
        return f"{path}/" if isinstance(node, Directory) else path

    def is_attached(self, node: Node) -> bool:
        """Return whether ``node`` is reachable from the root via its parents."""
        current: Node = node
        while current is not self.root:
            parent = current.parent
            if parent is None or parent.children.get(current.key) is not current:
                return False
            current = parent
        return True

    def _segments(self, node: Node) -> list[str]:
        names: list[str] = []
        current: Node | None = node
        while current is not None and current is not self.root:
            names.append(current.name)
            current = current.parent
        names.reverse()
        return names
