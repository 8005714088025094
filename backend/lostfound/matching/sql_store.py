from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models.found_item import FoundItem
from ..models.lost_item import LostItem
from ..models.match import Match
from ..models.notification import Notification
from .errors import PersistenceWriteError, SourceReadError
from .store import MatchStore
from .types import (
    FoundReport,
    LostReport,
    MatchRecord,
    NotificationDraft,
    ReportKind,
    ReportStatus,
)


def lost_report_from_row(row: LostItem) -> LostReport:
    return LostReport(
        id=row.id,
        user_id=row.user_id,
        item_name=row.item_name,
        category=row.category,
        description=row.description or "",
        location_lost=row.location_lost,
        date_lost=row.date_lost,
        image_url=row.image_url,
        status=ReportStatus(row.status),
    )


def found_report_from_row(row: FoundItem) -> FoundReport:
    return FoundReport(
        id=row.id,
        user_id=row.user_id,
        item_name=row.item_name,
        category=row.category,
        description=row.description or "",
        location_found=row.location_found,
        date_found=row.date_found,
        image_url=row.image_url,
        status=ReportStatus(row.status),
    )


class SqlAlchemyMatchStore(MatchStore):
    """MatchStore over the Flask-SQLAlchemy session.

    Matches and notifications inserted inside ``transaction()`` are
    committed together; any failure rolls both back.
    """

    def __init__(self, session=None):
        self.session = session or db.session
        # Rows written by committed transactions, for post-commit publishing
        self.created_matches: list[Match] = []
        self.created_notifications: list[Notification] = []
        self._pending_matches: list[Match] = []
        self._pending_notifications: list[Notification] = []

    def fetch_pending(self, kind: ReportKind) -> Sequence[LostReport] | Sequence[FoundReport]:
        model = LostItem if kind == ReportKind.LOST else FoundItem
        convert = lost_report_from_row if kind == ReportKind.LOST else found_report_from_row
        try:
            rows = self.session.execute(
                select(model).where(model.status == ReportStatus.PENDING.value).order_by(model.id)
            ).scalars().all()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise SourceReadError(f"Could not fetch pending {kind.value} reports: {exc}") from exc
        return [convert(r) for r in rows]

    def existing_match(self, lost_id: int, found_id: int) -> bool:
        try:
            row = self.session.execute(
                select(Match.id)
                .where(Match.lost_item_id == lost_id)
                .where(Match.found_item_id == found_id)
                .limit(1)
            ).first()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise SourceReadError(f"Could not look up existing match: {exc}") from exc
        return row is not None

    @contextmanager
    def transaction(self) -> Iterator[None]:
        self._pending_matches = []
        self._pending_notifications = []
        try:
            yield
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise PersistenceWriteError(f"Could not store matches and notifications: {exc}") from exc
        except BaseException:
            self.session.rollback()
            raise
        self.created_matches.extend(self._pending_matches)
        self.created_notifications.extend(self._pending_notifications)

    def insert_matches(self, records: Sequence[MatchRecord]) -> None:
        rows = [
            Match(
                lost_item_id=r.lost_item_id,
                found_item_id=r.found_item_id,
                match_score=r.match_score,
                match_reason=r.match_reason,
                status=r.status.value,
            )
            for r in records
        ]
        self.session.add_all(rows)
        # Flush so a unique-constraint violation surfaces inside the transaction scope
        self.session.flush()
        self._pending_matches.extend(rows)

    def insert_notifications(self, records: Sequence[NotificationDraft]) -> None:
        rows = [
            Notification(
                user_id=r.user_id,
                title=r.title,
                message=r.message,
                type=r.type,
                read=r.read,
                related_item_id=r.related_item_id,
            )
            for r in records
        ]
        self.session.add_all(rows)
        self.session.flush()
        self._pending_notifications.extend(rows)
