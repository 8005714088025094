from flask import Blueprint, Flask, g, request, current_app

from ...extensions import db
from ...modules.reports.routes import bp as reports_bp
from ...modules.matches.routes import bp as matches_bp
from ...modules.matching.routes import bp as matching_bp
from ...modules.notifications.routes import bp as notifications_bp


def register_api(app: Flask) -> None:
    api_v1 = Blueprint("api_v1", __name__, url_prefix="/api/v1")

    # Identity loader. Bearer tokens are always accepted; in development
    # (DEBUG=True) an `X-User-Id` header is accepted too for local testing.
    # The matching trigger does not depend on it.
    @api_v1.before_request  # type: ignore
    def _load_current_user():
        from ...models.user import User  # local import to avoid circulars
        from ...security import verify_token
        uid: int | None = None

        auth = request.headers.get("Authorization") or ""
        if auth.lower().startswith("bearer "):
            uid = verify_token(auth[7:].strip())
        elif current_app.config.get("DEBUG"):
            raw = (request.headers.get("X-User-Id") or "").strip()
            if raw.isdigit() and int(raw) > 0:
                uid = int(raw)
        user_obj = db.session.get(User, uid) if uid is not None else None
        g.current_user = user_obj  # type: ignore[attr-defined]
        g.current_user_id = user_obj.id if user_obj else None  # type: ignore[attr-defined]

    # Mount feature blueprints
    api_v1.register_blueprint(reports_bp)
    api_v1.register_blueprint(matches_bp)
    api_v1.register_blueprint(matching_bp)
    api_v1.register_blueprint(notifications_bp)

    app.register_blueprint(api_v1)
