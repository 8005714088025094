from __future__ import annotations

from typing import Optional

from flask import current_app
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired


def _serializer() -> URLSafeTimedSerializer:
    # Salt provides namespace isolation for tokens
    return URLSafeTimedSerializer(secret_key=current_app.config["SECRET_KEY"], salt="lostfound-auth")


def issue_token(user_id: int) -> str:
    """Issue a signed bearer token carrying only the user id."""
    return _serializer().dumps({"id": int(user_id)})


def verify_token(token: str) -> Optional[int]:
    """Return the user id for a valid, unexpired token, else None.

    Max age comes from AUTH_TOKEN_MAX_AGE (seconds).
    """
    max_age = int(current_app.config.get("AUTH_TOKEN_MAX_AGE", 60 * 60 * 24 * 30))
    try:
        data = _serializer().loads(token, max_age=max_age)
    except (BadSignature, SignatureExpired):
        return None
    if not isinstance(data, dict) or data.get("id") is None:
        return None
    try:
        return int(data["id"])
    except (TypeError, ValueError):
        return None
