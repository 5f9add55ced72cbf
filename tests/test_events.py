import logging

from vfshell.events import EventBus
from vfshell.models import CommandResult


def test_publish_without_subscribers_is_noop() -> None:
    bus = EventBus()
    bus.publish(CommandResult("hello"))
    assert bus.subscriber_count == 0


def test_subscribers_called_in_registration_order() -> None:
    bus = EventBus()
    calls: list[tuple[str, str]] = []
    bus.subscribe(lambda result: calls.append(("first", result.console_output)))
    bus.subscribe(lambda result: calls.append(("second", result.console_output)))

    bus.publish(CommandResult("a"))
    bus.publish(CommandResult("b"))
    assert calls == [("first", "a"), ("second", "a"), ("first", "b"), ("second", "b")]


def test_unsubscribe_and_unknown_unsubscribe() -> None:
    bus = EventBus()
    seen: list[CommandResult] = []
    callback = bus.subscribe(seen.append)
    bus.unsubscribe(callback)
    bus.unsubscribe(callback)
    bus.publish(CommandResult("ignored"))
    assert seen == []


def test_unsubscribe_during_publish_applies_to_next_publish() -> None:
    bus = EventBus()
    calls: list[str] = []

    def once(result: CommandResult) -> None:
        calls.append("once")
        bus.unsubscribe(once)

    bus.subscribe(once)
    bus.subscribe(lambda result: calls.append("always"))
    bus.publish(CommandResult())
    bus.publish(CommandResult())
    assert calls == ["once", "always", "always"]


def test_failing_subscriber_does_not_stop_delivery(caplog) -> None:
    bus = EventBus()
    seen: list[CommandResult] = []

    def broken(result: CommandResult) -> None:
        raise RuntimeError("display crashed")

    bus.subscribe(broken)
    bus.subscribe(seen.append)
    result = CommandResult("x", command_executed="echo")
    with caplog.at_level(logging.ERROR, logger="vfshell.events"):
        bus.publish(result)
    assert seen == [result]
    assert "echo" in caplog.text


def test_isolated_instances_do_not_share_subscribers() -> None:
    first = EventBus()
    second = EventBus()
    seen: list[CommandResult] = []
    first.subscribe(seen.append)
    second.publish(CommandResult("other bus"))
    assert seen == []
