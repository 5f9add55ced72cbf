"""Milestone tracking driven purely by published command results."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass

from .models import CommandResult
from .policy import AccessPolicy

MilestoneListener = Callable[["Milestone"], None]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Milestone:
    """Declarative trigger over one result plus the effects of reaching it."""

    id: str
    command: str
    target_name: str | None = None
    location: str | None = None
    requires: tuple[str, ...] = ()
    unlocks: tuple[str, ...] = ()
    unblocks: tuple[str, ...] = ()
    narrative: tuple[str, ...] = ()

    def matches(self, result: CommandResult) -> bool:
        """Return whether a successful result satisfies this trigger."""
        if result.is_error or result.command_executed != self.command:
            return False
        target = result.target_node
        if self.target_name is not None:
            if target is None or target.name.lower() != self.target_name.lower():
                return False
        if self.location is not None:
            place = _location_name(result)
            if place is None or place.lower() != self.location.lower():
                return False
        return True


@dataclass(frozen=True)
class NarrativeEntry:
    """Lines to reveal, one acknowledgment at a time, for one milestone."""

    milestone_id: str
    lines: tuple[str, ...]


class NarrativeQueue:
    """FIFO of narrative entries waiting to be shown."""

    def __init__(self) -> None:
        self._entries: deque[NarrativeEntry] = deque()

    def __len__(self) -> int:
        return len(self._entries)

    def enqueue(self, milestone_id: str, lines: Iterable[str]) -> None:
        self._entries.append(NarrativeEntry(milestone_id=milestone_id, lines=tuple(lines)))

    def drain(self) -> Iterator[NarrativeEntry]:
        """Yield queued entries in order, removing each as it is yielded."""
        while self._entries:
            yield self._entries.popleft()


class ProgressionTracker:
    """Evaluate milestones against each result and apply their gating effects.

    At most one milestone fires per result: the first unachieved one, in table
    order, whose trigger matches and whose prerequisites are all achieved.
    """

    def __init__(
        self,
        milestones: Sequence[Milestone],
        policy: AccessPolicy | None = None,
        narrative: NarrativeQueue | None = None,
    ) -> None:
        self.milestones = tuple(milestones)
        self.policy = policy
        self.narrative = narrative
        self._by_id = {milestone.id: milestone for milestone in self.milestones}
        self._achieved: set[str] = set()
        self._listeners: list[MilestoneListener] = []

    @property
    def achieved(self) -> frozenset[str]:
        return frozenset(self._achieved)

    def pending(self) -> list[Milestone]:
        """Return milestones not reached yet, in table order."""
        return [milestone for milestone in self.milestones if milestone.id not in self._achieved]

    def on_milestone(self, listener: MilestoneListener) -> MilestoneListener:
        self._listeners.append(listener)
        return listener

    def __call__(self, result: CommandResult) -> None:
        self.handle(result)

    def handle(self, result: CommandResult) -> Milestone | None:
        """Fire the first eligible milestone matched by ``result``."""
        if result.is_error:
            return None
        for milestone in self.milestones:
            if milestone.id in self._achieved:
                continue
            if not all(dep in self._achieved for dep in milestone.requires):
                continue
            if milestone.matches(result):
                self._achieve(milestone, with_narrative=True)
                return milestone
        return None

    def force_achieve(self, milestone_id: str) -> list[str]:
        """Mark a milestone and all its prerequisites reached, without narrative."""
        if milestone_id not in self._by_id:
            raise KeyError(milestone_id)

        visited: set[str] = set()
        order: list[str] = []

        def visit(current: str) -> None:
            if current in visited:
                return
            visited.add(current)
            for prerequisite in self._by_id[current].requires:
                visit(prerequisite)
            order.append(current)

        visit(milestone_id)
        for item in order:
            if item not in self._achieved:
                self._achieve(self._by_id[item], with_narrative=False)
        return order

    def _achieve(self, milestone: Milestone, *, with_narrative: bool) -> None:
        self._achieved.add(milestone.id)
        logger.info("Milestone reached: %s", milestone.id)
        if self.policy is not None:
            for command in milestone.unlocks:
                self.policy.allow(command)
            for pattern in milestone.unblocks:
                self.policy.unblock(pattern)
        if with_narrative and self.narrative is not None and milestone.narrative:
            self.narrative.enqueue(milestone.id, milestone.narrative)
        for listener in list(self._listeners):
            listener(milestone)


def _location_name(result: CommandResult) -> str | None:
    """Name of the directory a result happened in, as seen from its payload."""
    target = result.target_node
    if target is None:
        return None
    if result.command_executed == "cd":
        return target.name
    parent = target.parent
    return None if parent is None else parent.name
