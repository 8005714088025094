from sqlalchemy import UniqueConstraint, func, Index
from ..extensions import db
from .enums import BigIntPK, match_status_enum


class Match(db.Model):
    __tablename__ = "matches"

    id = db.Column(BigIntPK, primary_key=True)
    lost_item_id = db.Column(db.BigInteger, db.ForeignKey("lost_items.id", ondelete="CASCADE"), nullable=False)
    found_item_id = db.Column(db.BigInteger, db.ForeignKey("found_items.id", ondelete="CASCADE"), nullable=False)
    match_score = db.Column(db.Integer, nullable=False, server_default="0")
    match_reason = db.Column(db.Text, nullable=False, server_default="")
    status = db.Column(match_status_enum, nullable=False, server_default="pending")
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())

    lost_item = db.relationship("LostItem", back_populates="matches")
    found_item = db.relationship("FoundItem", back_populates="matches")

    __table_args__ = (
        # Storage backstop for concurrent runs; the engine dedups before insert
        UniqueConstraint("lost_item_id", "found_item_id", name="uq_matches_lost_found"),
        Index("idx_matches_lost", "lost_item_id"),
        Index("idx_matches_found", "found_item_id"),
    )
