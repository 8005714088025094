from __future__ import annotations

from datetime import datetime, timedelta, timezone

from sqlalchemy import false, or_, update
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from .enums import BigIntPK


class RunLease(db.Model):
    """Named, expiring lease row used to serialize batch jobs across workers."""

    __tablename__ = "run_leases"

    id = db.Column(BigIntPK, primary_key=True)
    name = db.Column(db.String(120), nullable=False, unique=True, index=True)
    holder = db.Column(db.String(120))
    acquired_at = db.Column(db.DateTime(timezone=True))
    expires_at = db.Column(db.DateTime(timezone=True))
    rerun_requested = db.Column(db.Boolean, nullable=False, default=False, server_default=false())

    @staticmethod
    def acquire(name: str, holder: str, ttl_seconds: int) -> bool:
        """Take the lease if it is free or expired. Returns True on success.

        The conditional UPDATE is the compare-and-set; only one worker can
        see rowcount == 1 for a given free lease.
        """
        if RunLease.query.filter_by(name=name).first() is None:
            try:
                db.session.add(RunLease(name=name))
                db.session.commit()
            except IntegrityError:
                # Created concurrently by another worker
                db.session.rollback()

        now = datetime.now(timezone.utc)
        result = db.session.execute(
            update(RunLease)
            .where(RunLease.name == name)
            .where(or_(RunLease.holder.is_(None), RunLease.expires_at < now))
            .values(
                holder=holder,
                acquired_at=now,
                expires_at=now + timedelta(seconds=ttl_seconds),
                rerun_requested=False,
            )
            .execution_options(synchronize_session=False)
        )
        db.session.commit()
        return result.rowcount == 1

    @staticmethod
    def release(name: str, holder: str) -> None:
        db.session.execute(
            update(RunLease)
            .where(RunLease.name == name)
            .where(RunLease.holder == holder)
            .values(holder=None, expires_at=None, rerun_requested=False)
            .execution_options(synchronize_session=False)
        )
        db.session.commit()

    @staticmethod
    def holder_of(name: str) -> str | None:
        row = RunLease.query.filter_by(name=name).first()
        if row is None or row.holder is None:
            return None
        return row.holder

    @staticmethod
    def request_rerun(name: str) -> bool:
        """Flag a live lease so its holder runs once more. False if the lease is free."""
        now = datetime.now(timezone.utc)
        result = db.session.execute(
            update(RunLease)
            .where(RunLease.name == name)
            .where(RunLease.holder.is_not(None))
            .where(RunLease.expires_at >= now)
            .values(rerun_requested=True)
            .execution_options(synchronize_session=False)
        )
        db.session.commit()
        return result.rowcount == 1

    @staticmethod
    def release_if_idle(name: str, holder: str, ttl_seconds: int) -> bool:
        """Release unless a rerun was requested; otherwise consume the request and renew.

        Returns True when the lease was released.
        """
        result = db.session.execute(
            update(RunLease)
            .where(RunLease.name == name)
            .where(RunLease.holder == holder)
            .where(RunLease.rerun_requested.is_(False))
            .values(holder=None, expires_at=None)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            db.session.commit()
            return True

        now = datetime.now(timezone.utc)
        renewed = db.session.execute(
            update(RunLease)
            .where(RunLease.name == name)
            .where(RunLease.holder == holder)
            .values(rerun_requested=False, expires_at=now + timedelta(seconds=ttl_seconds))
            .execution_options(synchronize_session=False)
        )
        db.session.commit()
        # Lease lost to expiry: someone else owns the next pass
        return renewed.rowcount == 0
