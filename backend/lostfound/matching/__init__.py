"""Matching engine: pairs pending lost reports with pending found reports."""
from .engine import MATCH_THRESHOLD, MatchEngine
from .errors import MatchingError, PersistenceWriteError, RunInProgressError, SourceReadError
from .lock import LeaseRunLock, LocalRunLock, RunLock
from .scorer import score_pair
from .store import MatchStore
from .types import (
    FoundReport,
    LostReport,
    MatchRecord,
    MatchScore,
    MatchStatus,
    NotificationDraft,
    ReportKind,
    ReportStatus,
    RunSummary,
)

__all__ = [
    "MATCH_THRESHOLD",
    "MatchEngine",
    "MatchingError",
    "PersistenceWriteError",
    "RunInProgressError",
    "SourceReadError",
    "LeaseRunLock",
    "LocalRunLock",
    "RunLock",
    "score_pair",
    "MatchStore",
    "FoundReport",
    "LostReport",
    "MatchRecord",
    "MatchScore",
    "MatchStatus",
    "NotificationDraft",
    "ReportKind",
    "ReportStatus",
    "RunSummary",
]
