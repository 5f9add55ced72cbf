"""CLI entrypoint for the virtual file system shell."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .events import EventBus
from .interpreter import CommandInterpreter
from .policy import AccessPolicy
from .progression import NarrativeQueue, ProgressionTracker
from .views import ConsoleView, SceneView
from .vfs import VirtualFileSystem
from .world_loader import DEFAULT_WORLD, World, list_worlds, load_world, load_world_from_path

InputFn = Callable[[str], str]
PrintFn = Callable[[str], None]
EXIT_COMMANDS = {":quit", ":exit", ":q"}
ACK_PROMPT = "(press Enter) "

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Every component of one running shell, wired to a shared bus."""

    world: World
    vfs: VirtualFileSystem
    bus: EventBus
    interpreter: CommandInterpreter
    policy: AccessPolicy
    console: ConsoleView
    scene: SceneView
    progression: ProgressionTracker
    narrative: NarrativeQueue

    def process_line(self, raw: str) -> None:
        """Submit one line through the access policy."""
        self.policy.process_line(raw)


def build_session(world: World, print_fn: PrintFn | None = print, *, unlock_all: bool = False) -> Session:
    """Seed a world and subscribe its observers in delivery order."""
    vfs = world.build_vfs()
    bus = EventBus()
    interpreter = CommandInterpreter(vfs, bus)
    policy = AccessPolicy(interpreter, bus, allowed=world.allowed_commands, blocked=world.blocked_commands)
    console = ConsoleView(print_fn)
    scene = SceneView(vfs.current_directory)
    narrative = NarrativeQueue()
    progression = ProgressionTracker(world.milestones, policy=policy, narrative=narrative)

    bus.subscribe(console)
    bus.subscribe(scene)
    bus.subscribe(progression)

    if unlock_all:
        for milestone in world.milestones:
            progression.force_achieve(milestone.id)
        for command in interpreter.commands:
            policy.allow(command)
        for pattern in policy.blocked:
            policy.unblock(pattern)

    return Session(
        world=world,
        vfs=vfs,
        bus=bus,
        interpreter=interpreter,
        policy=policy,
        console=console,
        scene=scene,
        progression=progression,
        narrative=narrative,
    )


def run(argv: list[str] | None = None) -> int:
    """Run the CLI application."""
    parser = argparse.ArgumentParser(prog="vfshell", description="Explore a virtual file system with shell commands")
    parser.add_argument("command", nargs="?", default="play", choices=["play", "worlds"])
    parser.add_argument("--world", default=DEFAULT_WORLD, help="bundled world id")
    parser.add_argument("--world-file", type=Path, help="load a world definition from a JSON file")
    parser.add_argument("--unlock-all", action="store_true", help="start with every command available")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    if args.command == "worlds":
        for world_id in list_worlds():
            print(world_id)
        return 0

    try:
        world = load_world_from_path(args.world_file) if args.world_file else load_world(args.world)
        session = build_session(world, unlock_all=args.unlock_all)
    except (OSError, ValueError, KeyError) as exc:
        print(f"Could not load world: {exc}")
        return 1

    return play_shell(session)


def play_shell(
    session: Session,
    input_fn: InputFn = input,
    print_fn: PrintFn = print,
    *,
    acknowledge: bool = True,
) -> int:
    """Read lines until the user leaves, showing narrative after each one."""
    print_fn(f"=== {session.world.title} ===")
    for line in session.world.intro:
        print_fn(line)

    while True:
        try:
            raw = input_fn(f"{session.vfs.current_path()}> ")
        except (EOFError, KeyboardInterrupt):
            print_fn("")
            return 0
        if raw.strip().lower() in EXIT_COMMANDS:
            return 0
        session.process_line(raw)
        if not _show_narrative(session.narrative, input_fn, print_fn, acknowledge=acknowledge):
            return 0


def _show_narrative(narrative: NarrativeQueue, input_fn: InputFn, print_fn: PrintFn, *, acknowledge: bool) -> bool:
    """Reveal queued narrative one line at a time; returns False if input ended."""
    for entry in narrative.drain():
        logger.debug("Showing narrative for %s", entry.milestone_id)
        for index, line in enumerate(entry.lines):
            print_fn(line)
            if acknowledge and index < len(entry.lines) - 1:
                try:
                    input_fn(ACK_PROMPT)
                except (EOFError, KeyboardInterrupt):
                    return False
    return True


def main_entry() -> None:
    """Console script entrypoint."""
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main_entry()
