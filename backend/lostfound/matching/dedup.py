from __future__ import annotations

from .store import MatchStore


class MatchDeduplicator:
    """Answers whether a (lost, found) pair already has a match.

    Pairs staged earlier in the current run count as existing too, so a
    duplicated input row cannot produce a second draft for the same pair.
    """

    def __init__(self, store: MatchStore):
        self.store = store
        self._staged: set[tuple[int, int]] = set()

    def exists(self, lost_id: int, found_id: int) -> bool:
        if (lost_id, found_id) in self._staged:
            return True
        return self.store.existing_match(lost_id, found_id)

    def stage(self, lost_id: int, found_id: int) -> None:
        self._staged.add((lost_id, found_id))
