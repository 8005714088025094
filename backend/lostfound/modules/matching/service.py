"""Trigger boundary for the matching engine.

Every entry point (HTTP route, Celery task, CLI command, report
submission) goes through ``trigger_matching`` so that all of them return
the same result shape and leave a ``match_runs`` row behind.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ...extensions import db
from ...matching import (
    LeaseRunLock,
    LocalRunLock,
    MatchEngine,
    MatchingError,
    RunInProgressError,
    RunLock,
    RunSummary,
)
from ...matching.sql_store import SqlAlchemyMatchStore
from ...models.match_run import MatchRun
from ..notifications.bus import publish
from ..notifications.routes import notif_to_dict

logger = logging.getLogger(__name__)

# Shared by every request in this process when MATCH_LOCK_BACKEND=local
_local_lock = LocalRunLock()


def build_lock() -> RunLock:
    if current_app.config.get("MATCH_LOCK_BACKEND", "lease") == "local":
        return _local_lock
    return LeaseRunLock(ttl_seconds=int(current_app.config.get("MATCH_LOCK_TTL_SECONDS", 300)))


def build_engine(store: SqlAlchemyMatchStore) -> MatchEngine:
    return MatchEngine(store, lock=build_lock())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _start_run(trigger: str) -> MatchRun:
    run = MatchRun(triggered_by=trigger, status="running", started_at=_now())
    db.session.add(run)
    db.session.commit()
    return run


def _finish_run(run: MatchRun, run_id: int, summary: RunSummary | None = None, error: str | None = None) -> None:
    try:
        run.finished_at = _now()
        if summary is not None:
            run.status = "succeeded"
            run.matches_found = summary.matches_found
            run.notifications_created = summary.notifications_created
            run.pairs_scored = summary.pairs_scored
        else:
            run.status = "failed"
            run.error = error
        db.session.commit()
    except SQLAlchemyError:
        # Bookkeeping only; the run's own outcome is already decided
        db.session.rollback()
        logger.exception("Could not record outcome of match run %s", run_id)


def _publish_created(store: SqlAlchemyMatchStore) -> None:
    for n in store.created_notifications:
        publish(n.user_id, notif_to_dict(n))


def _failure(message: str, status: int = 500) -> tuple[dict, int]:
    return {"success": False, "error": message}, status


def trigger_matching(trigger: str = "api") -> tuple[dict, int]:
    """Run the engine once and return ``(body, http_status)``."""
    try:
        run = _start_run(trigger)
        run_id = run.id
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Matching run (%s) could not start: %s", trigger, exc)
        return _failure(f"Could not start matching run: {exc}")

    store = SqlAlchemyMatchStore()
    try:
        summary = build_engine(store).run()
    except RunInProgressError as exc:
        logger.info("Matching run %s deferred to the run in progress: %s", run_id, exc)
        _finish_run(run, run_id, error=str(exc))
        return _failure(str(exc), 409)
    except MatchingError as exc:
        logger.error("Matching run %s failed: %s", run_id, exc)
        _finish_run(run, run_id, error=str(exc))
        return _failure(str(exc))
    except Exception as exc:
        db.session.rollback()
        logger.exception("Matching run %s crashed", run_id)
        _finish_run(run, run_id, error=str(exc) or exc.__class__.__name__)
        return _failure(str(exc) or "Unknown error")

    _finish_run(run, run_id, summary=summary)
    _publish_created(store)
    n = summary.matches_found
    return {"success": True, "matchesFound": n, "message": f"Found {n} potential matches"}, 200


def run_to_dict(run: MatchRun) -> dict:
    return {
        "id": run.id,
        "trigger": run.triggered_by,
        "status": run.status,
        "matchesFound": run.matches_found,
        "notificationsCreated": run.notifications_created,
        "pairsScored": run.pairs_scored,
        "error": run.error,
        "startedAt": run.started_at.isoformat() if run.started_at else None,
        "finishedAt": run.finished_at.isoformat() if run.finished_at else None,
    }
