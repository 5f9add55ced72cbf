"""Load declarative world definitions from bundled JSON resources."""

from __future__ import annotations

import json
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

from .models import Directory
from .progression import Milestone
from .vfs import VirtualFileSystem

CONTENT_PACKAGE = "vfshell.content.worlds"
DEFAULT_WORLD = "default"
NODE_TYPES = {"directory", "file"}


@dataclass(frozen=True)
class NodeSpec:
    """One node of a world's seed tree."""

    name: str
    kind: str
    content: str
    children: tuple[NodeSpec, ...]


@dataclass(frozen=True)
class World:
    """A seed tree plus its starting command gates and milestones."""

    id: str
    title: str
    intro: list[str]
    tree: tuple[NodeSpec, ...]
    well_known: dict[str, str]
    allowed_commands: list[str]
    blocked_commands: list[str]
    milestones: list[Milestone]

    def build_vfs(self) -> VirtualFileSystem:
        """Create a freshly seeded file system for this world."""
        vfs = VirtualFileSystem()
        for spec in self.tree:
            _seed(vfs, spec, vfs.root)
        for role, path in self.well_known.items():
            directory = vfs.resolve_absolute(path)
            if not isinstance(directory, Directory):
                raise ValueError(f"Well-known '{role}' path '{path}' is not a directory in world '{self.id}'.")
            vfs.register_well_known(role, directory)
        return vfs


def _seed(vfs: VirtualFileSystem, spec: NodeSpec, parent: Directory) -> None:
    if spec.kind == "directory":
        directory = vfs.create_directory(spec.name, parent)
        for child in spec.children:
            _seed(vfs, child, directory)
    else:
        vfs.create_file(spec.name, spec.content, parent)


def _node_from_dict(raw: dict[str, Any]) -> NodeSpec:
    """Build a node spec from raw JSON content."""
    name = str(raw.get("name", "")).strip()
    if not name or "/" in name:
        raise ValueError(f"Invalid node name: {raw.get('name')!r}")
    kind = str(raw.get("type", "file"))
    if kind not in NODE_TYPES:
        raise ValueError(f"Node '{name}' has unknown type '{kind}'.")
    if kind == "file" and raw.get("children"):
        raise ValueError(f"File '{name}' cannot have children.")
    children = tuple(_node_from_dict(item) for item in raw.get("children", []))
    _validate_unique_names(name, children)
    return NodeSpec(name=name, kind=kind, content=str(raw.get("content", "")), children=children)


def _milestone_from_dict(raw: dict[str, Any]) -> Milestone:
    """Build a milestone from raw JSON content."""
    target_name = raw.get("target_name")
    location = raw.get("location")
    return Milestone(
        id=str(raw["id"]),
        command=str(raw["command"]).lower(),
        target_name=None if target_name is None else str(target_name),
        location=None if location is None else str(location),
        requires=tuple(str(item) for item in raw.get("requires", [])),
        unlocks=tuple(str(item).lower() for item in raw.get("unlocks", [])),
        unblocks=tuple(str(item).lower() for item in raw.get("unblocks", [])),
        narrative=tuple(str(item) for item in raw.get("narrative", [])),
    )


def _world_from_dict(raw: dict[str, Any]) -> World:
    """Build a world from raw JSON content."""
    world_id = str(raw["id"])
    tree = tuple(_node_from_dict(item) for item in raw.get("tree", []))
    _validate_unique_names("/", tree)
    milestones = [_milestone_from_dict(item) for item in raw.get("milestones", [])]
    _validate_milestones(milestones)
    return World(
        id=world_id,
        title=str(raw.get("title", world_id)),
        intro=[str(line) for line in raw.get("intro", [])],
        tree=tree,
        well_known={str(role): str(path) for role, path in raw.get("well_known", {}).items()},
        allowed_commands=[str(item).lower() for item in raw.get("allowed_commands", [])],
        blocked_commands=[str(item).lower() for item in raw.get("blocked_commands", [])],
        milestones=milestones,
    )


def load_world(world_id: str = DEFAULT_WORLD) -> World:
    """Load a bundled world by id."""
    entry = resources.files(CONTENT_PACKAGE).joinpath(f"{world_id}.json")
    if not entry.is_file():
        raise ValueError(f"Unknown world: {world_id}")
    return _world_from_dict(json.loads(entry.read_text(encoding="utf-8-sig")))


def list_worlds() -> list[str]:
    """Return the ids of bundled worlds."""
    names = [entry.name for entry in resources.files(CONTENT_PACKAGE).iterdir() if entry.name.endswith(".json")]
    return sorted(name.removesuffix(".json") for name in names)


def load_world_from_path(path: Path) -> World:
    """Load a world from a JSON file for tests/tools."""
    return _world_from_dict(json.loads(path.read_text(encoding="utf-8-sig")))


def _validate_unique_names(parent: str, children: tuple[NodeSpec, ...]) -> None:
    """Validate that sibling names do not collide ignoring case."""
    seen: set[str] = set()
    for child in children:
        key = child.name.lower()
        if key in seen:
            raise ValueError(f"Duplicate node name '{child.name}' in '{parent}'.")
        seen.add(key)


def _validate_milestones(milestones: list[Milestone]) -> None:
    """Validate ids are unique, prerequisites exist and the graph has no cycles."""
    by_id: dict[str, Milestone] = {}
    for milestone in milestones:
        if milestone.id in by_id:
            raise ValueError(f"Duplicate milestone id: {milestone.id}")
        by_id[milestone.id] = milestone

    for milestone in milestones:
        for prerequisite in milestone.requires:
            if prerequisite not in by_id:
                raise ValueError(f"Milestone '{milestone.id}' has unknown prerequisite '{prerequisite}'.")

    visiting: set[str] = set()
    visited: set[str] = set()

    def visit(milestone_id: str, path: list[str]) -> None:
        if milestone_id in visited:
            return
        if milestone_id in visiting:
            cycle_start = path.index(milestone_id)
            cycle_path = path[cycle_start:] + [milestone_id]
            raise ValueError(f"Circular milestone dependency detected: {' -> '.join(cycle_path)}")

        visiting.add(milestone_id)
        path.append(milestone_id)
        for prerequisite in by_id[milestone_id].requires:
            visit(prerequisite, path)
        path.pop()
        visiting.remove(milestone_id)
        visited.add(milestone_id)

    for milestone_id in by_id:
        visit(milestone_id, [])
