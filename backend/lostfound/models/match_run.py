from sqlalchemy import Index
from ..extensions import db
from .enums import BigIntPK, run_status_enum


class MatchRun(db.Model):
    """One invocation of the matching engine, successful or not."""

    __tablename__ = "match_runs"

    id = db.Column(BigIntPK, primary_key=True)
    triggered_by = db.Column(db.String(40), nullable=False, server_default="api")
    status = db.Column(run_status_enum, nullable=False, default="running", server_default="running")
    matches_found = db.Column(db.Integer, nullable=False, default=0, server_default="0")
    notifications_created = db.Column(db.Integer, nullable=False, default=0, server_default="0")
    pairs_scored = db.Column(db.Integer, nullable=False, default=0, server_default="0")
    error = db.Column(db.Text)
    started_at = db.Column(db.DateTime(timezone=True), nullable=False)
    finished_at = db.Column(db.DateTime(timezone=True))

    __table_args__ = (
        Index("idx_match_runs_started_at", "started_at"),
    )
