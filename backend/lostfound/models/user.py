from sqlalchemy import func
from ..extensions import db
from .enums import BigIntPK, role_enum


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(BigIntPK, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    full_name = db.Column(db.String(120))
    phone_number = db.Column(db.String(40))
    role = db.Column(role_enum, nullable=False, server_default="student")
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    lost_items = db.relationship(
        "LostItem",
        back_populates="owner",
        lazy=True,
        cascade="all, delete-orphan",
    )
    found_items = db.relationship(
        "FoundItem",
        back_populates="owner",
        lazy=True,
        cascade="all, delete-orphan",
    )
    notifications = db.relationship(
        "Notification",
        back_populates="user",
        lazy=True,
        cascade="all, delete-orphan",
    )
