"""Run-level mutual exclusion for the matching engine.

Two overlapping runs could both see a pair as new before either commits,
so every run holds one of these for its whole duration. A trigger that
finds the lock busy leaves a rerun request for the holder instead of
being dropped: the holder scans once more before it lets go, so reports
submitted mid-run are still scored.
"""
from __future__ import annotations

import logging
import os
import socket
import threading
import uuid
from abc import ABC, abstractmethod

from sqlalchemy.exc import SQLAlchemyError

from .errors import SourceReadError

logger = logging.getLogger(__name__)

DEFAULT_LEASE_NAME = "matching.find_matches"

# acquire / request_rerun can race with a holder that is just letting go
_DEFER_ATTEMPTS = 3


class RunLock(ABC):
    @abstractmethod
    def acquire(self) -> bool:
        """Take the lock without blocking. True on success."""

    @abstractmethod
    def request_rerun(self) -> bool:
        """Ask the current holder for one more pass. False if nobody holds the lock."""

    @abstractmethod
    def release_if_idle(self) -> bool:
        """Release unless a rerun was requested.

        Returns True once released. Returns False with the lock still held
        and the request consumed, meaning the caller owes another pass.
        """

    @abstractmethod
    def release(self) -> None:
        """Release unconditionally. Used on failure paths."""

    def acquire_or_defer(self) -> bool:
        """Take the lock, or hand the work to whoever holds it.

        True means the caller now holds the lock. False means a rerun was
        requested from the holder.
        """
        for _ in range(_DEFER_ATTEMPTS):
            if self.acquire():
                return True
            if self.request_rerun():
                return False
        return False


class LocalRunLock(RunLock):
    """In-process lock. Enough for a single worker process."""

    def __init__(self) -> None:
        self._mutex = threading.Lock()
        self._held = False
        self._rerun = False

    def acquire(self) -> bool:
        with self._mutex:
            if self._held:
                return False
            self._held = True
            self._rerun = False
            return True

    def request_rerun(self) -> bool:
        with self._mutex:
            if not self._held:
                return False
            self._rerun = True
            return True

    def release_if_idle(self) -> bool:
        with self._mutex:
            if self._rerun:
                self._rerun = False
                return False
            self._held = False
            return True

    def release(self) -> None:
        with self._mutex:
            self._held = False
            self._rerun = False


class LeaseRunLock(RunLock):
    """Lease row in the shared database, so workers on other hosts are excluded too.

    The lease expires after ``ttl_seconds`` so a crashed worker cannot
    block matching forever.
    """

    def __init__(self, name: str = DEFAULT_LEASE_NAME, ttl_seconds: int = 300, holder: str | None = None):
        self.name = name
        self.ttl_seconds = ttl_seconds
        self.holder = holder or f"{socket.gethostname()}:{os.getpid()}:{uuid.uuid4().hex[:8]}"

    def _call(self, action: str, fn, *args):
        from ..extensions import db

        try:
            return fn(self.name, *args)
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise SourceReadError(f"Could not {action} run lease: {exc}") from exc

    def acquire(self) -> bool:
        from ..models.run_lease import RunLease  # local import keeps the core importable without Flask

        ok = self._call("acquire", RunLease.acquire, self.holder, self.ttl_seconds)
        if not ok:
            logger.info("Lease %s is held by %s", self.name, self._call("read", RunLease.holder_of))
        return ok

    def request_rerun(self) -> bool:
        from ..models.run_lease import RunLease

        return self._call("flag", RunLease.request_rerun)

    def release_if_idle(self) -> bool:
        from ..models.run_lease import RunLease

        return self._call("release", RunLease.release_if_idle, self.holder, self.ttl_seconds)

    def release(self) -> None:
        from ..extensions import db
        from ..models.run_lease import RunLease

        try:
            RunLease.release(self.name, self.holder)
        except SQLAlchemyError:
            # The run itself already finished; the lease will expire after its TTL
            db.session.rollback()
            logger.exception("Failed to release lease %s", self.name)
