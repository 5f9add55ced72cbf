from __future__ import annotations

import shutil
import sys
from collections.abc import Iterator
from pathlib import Path
from uuid import uuid4

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from vfshell.events import EventBus  # noqa: E402
from vfshell.interpreter import CommandInterpreter  # noqa: E402
from vfshell.models import CommandResult  # noqa: E402
from vfshell.vfs import VirtualFileSystem  # noqa: E402


def build_sample_vfs() -> VirtualFileSystem:
    """Small tree shared by most tests.

    /bin/  /fairy.exe  /forest/diary.txt  /Home/find  /Home/notes.txt  /Home/core/diary.txt
    """
    fs = VirtualFileSystem()
    bin_dir = fs.create_directory("bin")
    forest = fs.create_directory("forest")
    fs.create_file("diary.txt", "This is a secret diary...", forest)
    fs.create_file("fairy.exe", "I am Ririn.")
    home = fs.create_directory("Home")
    fs.create_file("find", "#!builtin find", home)
    fs.create_file("notes.txt", "home notes", home)
    core = fs.create_directory("core", home)
    fs.create_file("diary.txt", "core diary", core)
    fs.register_well_known("bin", bin_dir)
    return fs


@pytest.fixture
def vfs() -> VirtualFileSystem:
    return build_sample_vfs()


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def published(bus: EventBus) -> list[CommandResult]:
    """Every result published on the ``bus`` fixture, in order."""
    seen: list[CommandResult] = []
    bus.subscribe(seen.append)
    return seen


@pytest.fixture
def interpreter(vfs: VirtualFileSystem, bus: EventBus) -> CommandInterpreter:
    return CommandInterpreter(vfs, bus)


@pytest.fixture(name="tmp_path")
def workspace_tmp_path() -> Iterator[Path]:
    """Per-test scratch directory under ``.tmp_pytest/`` in the checkout.

    Overrides pytest's builtin ``tmp_path`` so world files written by tests
    stay inside the project tree.
    """
    base = ROOT / ".tmp_pytest"
    base.mkdir(parents=True, exist_ok=True)
    path = base / uuid4().hex
    path.mkdir()
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
        if base.exists() and not any(base.iterdir()):
            base.rmdir()
