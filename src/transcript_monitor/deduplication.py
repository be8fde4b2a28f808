"""Tracking of transcript messages that were already handed out."""
from __future__ import annotations

from typing import Iterable, Iterator


class UsedMessageLedger:
    """Insertion-ordered set of consumed message IDs.

    IDs older than the low-water mark of the latest scrape can never be
    scanned again, so :meth:`prune_below` drops them to keep the ledger small.
    """

    def __init__(self, message_ids: Iterable[int] = ()) -> None:
        self._order: list[int] = []
        self._known: set[int] = set()
        for message_id in message_ids:
            self.add(message_id)

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._known

    def __iter__(self) -> Iterator[int]:
        return iter(self._order)

    def __len__(self) -> int:
        return len(self._order)

    def add(self, message_id: int) -> bool:
        """Record ``message_id``; return False if it was already known."""

        if message_id in self._known:
            return False
        self._known.add(message_id)
        self._order.append(message_id)
        return True

    def prune_below(self, earliest_id: int) -> int:
        """Remove IDs lower than ``earliest_id`` and return how many went away."""

        removed = 0
        for index in range(len(self._order) - 1, -1, -1):
            message_id = self._order[index]
            if message_id < earliest_id:
                del self._order[index]
                self._known.discard(message_id)
                removed += 1
        return removed

    def to_list(self) -> list[int]:
        return list(self._order)
