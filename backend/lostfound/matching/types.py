from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum


class ReportKind(str, Enum):
    LOST = "lost"
    FOUND = "found"


class ReportStatus(str, Enum):
    PENDING = "pending"
    MATCHED = "matched"
    CLOSED = "closed"


class MatchStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"


MATCH_FOUND = "match_found"


@dataclass(frozen=True)
class LostReport:
    id: int
    user_id: int
    item_name: str
    category: str
    description: str
    location_lost: str
    date_lost: date
    image_url: str | None = None
    status: ReportStatus = ReportStatus.PENDING


@dataclass(frozen=True)
class FoundReport:
    id: int
    user_id: int
    item_name: str
    category: str
    description: str
    location_found: str
    date_found: date
    image_url: str | None = None
    status: ReportStatus = ReportStatus.PENDING


@dataclass(frozen=True)
class MatchScore:
    score: int
    reason: str


@dataclass(frozen=True)
class MatchRecord:
    """A match about to be inserted; the store assigns id and created_at."""

    lost_item_id: int
    found_item_id: int
    match_score: int
    match_reason: str
    status: MatchStatus = MatchStatus.PENDING

    @property
    def pair(self) -> tuple[int, int]:
        return (self.lost_item_id, self.found_item_id)


@dataclass(frozen=True)
class NotificationDraft:
    user_id: int
    title: str
    message: str
    related_item_id: int
    type: str = MATCH_FOUND
    read: bool = False


@dataclass(frozen=True)
class RunSummary:
    matches_found: int = 0
    notifications_created: int = 0
    pairs_scored: int = 0
    lost_count: int = 0
    found_count: int = 0
    passes: int = 1

    def plus(self, later: RunSummary) -> RunSummary:
        """Totals over two passes; report counts come from the later pass."""
        return RunSummary(
            matches_found=self.matches_found + later.matches_found,
            notifications_created=self.notifications_created + later.notifications_created,
            pairs_scored=self.pairs_scored + later.pairs_scored,
            lost_count=later.lost_count,
            found_count=later.found_count,
            passes=self.passes + later.passes,
        )
