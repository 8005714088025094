from __future__ import annotations

import logging
from typing import Callable

from .dedup import MatchDeduplicator
from .errors import RunInProgressError
from .lock import LocalRunLock, RunLock
from .scorer import score_pair
from .store import MatchStore
from .types import (
    FoundReport,
    LostReport,
    MatchRecord,
    MatchScore,
    NotificationDraft,
    ReportKind,
    RunSummary,
)

logger = logging.getLogger(__name__)

MATCH_THRESHOLD = 50
NOTIFICATION_TITLE = "Potential Match Found!"

Scorer = Callable[[LostReport, FoundReport], MatchScore]


def lost_owner_message(lost: LostReport, found: FoundReport, score: int) -> str:
    return (
        f"We found a potential match for your lost item: {lost.item_name}. "
        f"Found item: {found.item_name}. Match score: {score}%"
    )


def found_owner_message(lost: LostReport, found: FoundReport, score: int) -> str:
    return (
        f"Your found item ({found.item_name}) may match a lost item: {lost.item_name}. "
        f"Match score: {score}%"
    )


def build_notifications(lost: LostReport, found: FoundReport, score: int) -> tuple[NotificationDraft, NotificationDraft]:
    """The two notifications every new match produces, lost owner first."""
    return (
        NotificationDraft(
            user_id=lost.user_id,
            title=NOTIFICATION_TITLE,
            message=lost_owner_message(lost, found, score),
            related_item_id=lost.id,
        ),
        NotificationDraft(
            user_id=found.user_id,
            title=NOTIFICATION_TITLE,
            message=found_owner_message(lost, found, score),
            related_item_id=found.id,
        ),
    )


class MatchEngine:
    """Batch pass over every pending (lost, found) pair.

    Scores each pair, keeps the ones at or above the threshold that have no
    match yet, and writes the new matches with their notifications at the
    end of the scan. Reports are never modified; confirming a match and
    closing reports happen elsewhere.

    Args:
        store: record source and persistence sink
        scorer: pair scoring function, ``score_pair`` unless overridden
        threshold: minimum score that produces a match
        lock: run lock; a private in-process lock when omitted

    A trigger that finds the lock busy fails with ``RunInProgressError`` but
    leaves a rerun request, so the run holding the lock scans again before
    it returns. The returned summary covers every pass.
    """

    def __init__(
        self,
        store: MatchStore,
        scorer: Scorer = score_pair,
        threshold: int = MATCH_THRESHOLD,
        lock: RunLock | None = None,
    ):
        self.store = store
        self.scorer = scorer
        self.threshold = threshold
        self.lock = lock or LocalRunLock()

    def run(self) -> RunSummary:
        if not self.lock.acquire_or_defer():
            raise RunInProgressError("A matching run is already in progress")
        try:
            summary = self._run()
            # Triggers that arrived mid-run asked for another pass
            while not self.lock.release_if_idle():
                logger.info("Rerun requested during matching; scanning again")
                summary = summary.plus(self._run())
        except BaseException:
            self.lock.release()
            raise
        return summary

    def _run(self) -> RunSummary:
        # Both reads happen before anything is scored; a failure here leaves no writes
        lost_items = list(self.store.fetch_pending(ReportKind.LOST))
        found_items = list(self.store.fetch_pending(ReportKind.FOUND))
        logger.info("Matching %d pending lost against %d pending found reports", len(lost_items), len(found_items))

        dedup = MatchDeduplicator(self.store)
        matches: list[MatchRecord] = []
        notifications: list[NotificationDraft] = []
        pairs = 0

        for lost in lost_items:
            for found in found_items:
                pairs += 1
                result = self.scorer(lost, found)
                if result.score < self.threshold:
                    continue
                if dedup.exists(lost.id, found.id):
                    logger.debug("Pair lost=%s found=%s already matched", lost.id, found.id)
                    continue
                dedup.stage(lost.id, found.id)
                matches.append(
                    MatchRecord(
                        lost_item_id=lost.id,
                        found_item_id=found.id,
                        match_score=result.score,
                        match_reason=result.reason,
                    )
                )
                notifications.extend(build_notifications(lost, found, result.score))
                logger.debug("New match lost=%s found=%s score=%d", lost.id, found.id, result.score)

        if matches:
            with self.store.transaction():
                self.store.insert_matches(matches)
                self.store.insert_notifications(notifications)

        summary = RunSummary(
            matches_found=len(matches),
            notifications_created=len(notifications),
            pairs_scored=pairs,
            lost_count=len(lost_items),
            found_count=len(found_items),
        )
        logger.info("Matching run finished: %d new matches from %d pairs", summary.matches_found, pairs)
        return summary
