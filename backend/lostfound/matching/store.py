"""Persistence contract used by the matching engine.

The engine only reads pending reports and existing match pairs, and only
appends matches and notifications. A Flask-SQLAlchemy implementation
lives in ``sql_store``; tests inject an in-memory double.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Sequence

from .types import FoundReport, LostReport, MatchRecord, NotificationDraft, ReportKind


class MatchStore(ABC):
    # --- Record source ---
    @abstractmethod
    def fetch_pending(self, kind: ReportKind) -> Sequence[LostReport] | Sequence[FoundReport]:
        """Reports of ``kind`` whose status is pending. Raises SourceReadError."""

    # --- Deduplicator backing ---
    @abstractmethod
    def existing_match(self, lost_id: int, found_id: int) -> bool:
        """True if a match for the pair was stored by an earlier run. Raises SourceReadError."""

    # --- Persistence sink ---
    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """Scope in which inserts become durable together or not at all.

        Raises PersistenceWriteError when the scope cannot be committed.
        """

    @abstractmethod
    def insert_matches(self, records: Sequence[MatchRecord]) -> None: ...

    @abstractmethod
    def insert_notifications(self, records: Sequence[NotificationDraft]) -> None: ...
