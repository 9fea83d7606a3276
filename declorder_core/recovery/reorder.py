"""Put members back into declaration order, one owner run at a time.

The member list arrives grouped by owner, but each group may have been
reordered by the host (typically alphabetically). Each maximal run of members
sharing an owner is sorted by the recovered declaration order, and only when
that order names every member of the run. Otherwise the run is left exactly as
it came in.
"""

from __future__ import annotations

import logging
from operator import attrgetter
from typing import Any, Callable, Generic, Iterator, Protocol, Sequence, TypeVar

from ..events import EventBus
from ..types import OrderedNames

__all__ = ["OrderSource", "PropertyReorderer", "contiguous_runs", "reorder"]

logger = logging.getLogger(__name__)

M = TypeVar("M")


class OrderSource(Protocol):
    def recover_order(self, owner: Any) -> OrderedNames | None:
        ...


def contiguous_runs(items: Sequence[M], key: Callable[[M], Any]) -> Iterator[tuple[int, int]]:
    """Yield ``(start, stop)`` slices of maximal runs with equal ``key``."""
    start = 0
    while start < len(items):
        owner = key(items[start])
        stop = start + 1
        while stop < len(items) and key(items[stop]) == owner:
            stop += 1
        yield start, stop
        start = stop


class PropertyReorderer(Generic[M]):
    """Reorder any member type through ``owner_of`` and ``name_of`` accessors."""

    def __init__(
        self,
        order_source: OrderSource,
        *,
        owner_of: Callable[[M], Any] = attrgetter("owner"),
        name_of: Callable[[M], str] = attrgetter("name"),
        events: EventBus | None = None,
    ) -> None:
        self.order_source = order_source
        self.owner_of = owner_of
        self.name_of = name_of
        self.events = events

    def reorder(self, members: Sequence[M]) -> list[M]:
        result = list(members)
        for start, stop in contiguous_runs(result, self.owner_of):
            result[start:stop] = self._reorder_run(result[start:stop])
        return result

    def _reorder_run(self, run: list[M]) -> list[M]:
        owner = self.owner_of(run[0])
        order = self.order_source.recover_order(owner)
        if order is None:
            self._skip(owner, "order unavailable")
            return run

        names = [self.name_of(member) for member in run]
        if not order.covers(names):
            missing = [name for name in names if name not in order]
            self._skip(owner, f"recovered order lacks {', '.join(missing)}")
            return run

        reordered = sorted(run, key=lambda member: order.index_of(self.name_of(member)))
        after = [self.name_of(member) for member in reordered]
        if after != names:
            logger.debug("reordered %s: %s -> %s", owner, names, after)
        if self.events is not None:
            self.events.emit("run_reordered", {"owner": str(owner), "before": names, "after": after})
        return reordered

    def _skip(self, owner: Any, reason: str) -> None:
        logger.debug("leaving members of %s as supplied: %s", owner, reason)
        if self.events is not None:
            self.events.emit("run_skipped", {"owner": str(owner), "reason": reason})


def reorder(
    members: Sequence[M],
    order_source: OrderSource,
    *,
    owner_of: Callable[[M], Any] = attrgetter("owner"),
    name_of: Callable[[M], str] = attrgetter("name"),
) -> list[M]:
    """Functional form of :meth:`PropertyReorderer.reorder`."""
    return PropertyReorderer(order_source, owner_of=owner_of, name_of=name_of).reorder(members)
