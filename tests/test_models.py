import pytest

from vfshell.models import CommandResult, Directory, ErrorKind, File, VFSError, display_name


def test_add_sets_parent_and_lowercased_key() -> None:
    parent = Directory("forest")
    child = File("Diary.TXT", "secret")
    parent.add(child)
    assert parent.children["diary.txt"] is child
    assert child.parent is parent
    assert child.name == "Diary.TXT"


def test_add_name_collision_keeps_original() -> None:
    parent = Directory("home")
    original = parent.add(File("notes.txt", "first"))
    with pytest.raises(VFSError) as excinfo:
        parent.add(Directory("NOTES.txt"))
    assert excinfo.value.kind is ErrorKind.NAME_CONFLICT
    assert excinfo.value.node is original
    assert parent.get("notes.txt") is original
    assert len(parent.children) == 1


def test_remove_detaches_child() -> None:
    parent = Directory("bin")
    child = parent.add(File("ls"))
    assert parent.remove("LS") is child
    assert child.parent is None
    assert parent.remove("ls") is None


def test_sorted_children_ignore_case() -> None:
    parent = Directory("d")
    for name in ("b", "A", "c"):
        parent.add(File(name))
    assert [node.name for node in parent.sorted_children()] == ["A", "b", "c"]


def test_name_is_read_only() -> None:
    node = File("x")
    with pytest.raises(AttributeError):
        node.name = "y"  # type: ignore[misc]


def test_parent_is_a_weak_back_reference() -> None:
    parent = Directory("tmp")
    child = parent.add(File("f"))
    del parent
    assert child.parent is None


def test_display_name_suffixes_directories() -> None:
    assert display_name(Directory("forest")) == "forest/"
    assert display_name(File("diary.txt")) == "diary.txt"


def test_nodes_compare_by_identity() -> None:
    assert File("same", "x") != File("same", "x")


def test_command_result_defaults_and_failure() -> None:
    empty = CommandResult()
    assert empty.console_output == ""
    assert empty.vfs_nodes == ()
    assert empty.is_error is False
    assert empty.command_executed == ""
    assert empty.target_node is None

    failed = CommandResult.failure(ErrorKind.NO_SUCH_FILE, "no such file: x", "cat")
    assert failed.is_error is True
    assert failed.error_kind is ErrorKind.NO_SUCH_FILE
    assert failed.command_executed == "cat"

    with pytest.raises(AttributeError):
        failed.is_error = False  # type: ignore[misc]


def test_add_rejects_node_attached_elsewhere() -> None:
    first = Directory("a")
    second = Directory("b")
    child = first.add(File("f"))
    with pytest.raises(ValueError):
        second.add(child)
    assert child.parent is first
    assert first.get("f") is child
    assert second.children == {}


def test_add_rejects_directory_into_itself_or_descendant() -> None:
    top = Directory("a")
    with pytest.raises(ValueError):
        top.add(top)
    assert top.parent is None

    inner = Directory("b")
    leaf = Directory("c")
    top.add(inner)
    inner.add(leaf)
    with pytest.raises(ValueError):
        leaf.add(top)
    assert top.parent is None
    assert leaf.children == {}
