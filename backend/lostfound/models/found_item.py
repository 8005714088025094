from sqlalchemy import func, Index
from ..extensions import db
from .enums import BigIntPK, report_status_enum


class FoundItem(db.Model):
    __tablename__ = "found_items"

    id = db.Column(BigIntPK, primary_key=True)
    user_id = db.Column(db.BigInteger, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    item_name = db.Column(db.String(200), nullable=False)
    category = db.Column(db.String(80), nullable=False)
    description = db.Column(db.Text, nullable=False, server_default="")
    location_found = db.Column(db.String(200), nullable=False)
    date_found = db.Column(db.Date, nullable=False)
    image_url = db.Column(db.String(512))
    status = db.Column(report_status_enum, nullable=False, server_default="pending")
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    owner = db.relationship("User", back_populates="found_items")
    matches = db.relationship("Match", back_populates="found_item", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_found_items_status", "status"),
        Index("idx_found_items_user", "user_id"),
        Index("idx_found_items_category", "category"),
    )
