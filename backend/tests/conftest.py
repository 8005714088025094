"""Pytest fixtures: an app on in-memory SQLite plus factories for users and reports."""
from __future__ import annotations

from datetime import date
from itertools import count

import pytest

from lostfound import create_app
from lostfound.extensions import db as _db
from lostfound.models import FoundItem, LostItem, User


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def make_user(app):
    n = count(1)

    def _make(**overrides) -> User:
        i = next(n)
        data = {"email": f"student{i}@campus.edu", "full_name": f"Student {i}"}
        data.update(overrides)
        user = User(**data)
        _db.session.add(user)
        _db.session.commit()
        return user

    return _make


@pytest.fixture
def make_lost(app):
    def _make(user: User, **overrides) -> LostItem:
        data = {
            "user_id": user.id,
            "item_name": "iPhone 13",
            "category": "Electronics",
            "description": "black iphone with cracked screen",
            "location_lost": "Library",
            "date_lost": date(2026, 10, 1),
            "status": "pending",
        }
        data.update(overrides)
        item = LostItem(**data)
        _db.session.add(item)
        _db.session.commit()
        return item

    return _make


@pytest.fixture
def make_found(app):
    def _make(user: User, **overrides) -> FoundItem:
        data = {
            "user_id": user.id,
            "item_name": "iPhone",
            "category": "Electronics",
            "description": "found a black phone cracked screen near library",
            "location_found": "Library entrance",
            "date_found": date(2026, 10, 3),
            "status": "pending",
        }
        data.update(overrides)
        item = FoundItem(**data)
        _db.session.add(item)
        _db.session.commit()
        return item

    return _make


@pytest.fixture
def as_user():
    """Request headers that authenticate as a user (DEBUG-only header)."""

    def _headers(user: User) -> dict:
        return {"X-User-Id": str(user.id)}

    return _headers
