from __future__ import annotations

from flask import Flask

from lostfound.tasks.celery_app import celery_app

_flask_app: Flask | None = None


def _app() -> Flask:
    global _flask_app
    if _flask_app is None:
        from lostfound import create_app

        _flask_app = create_app()
    return _flask_app


@celery_app.task(name="lostfound.find_matches")
def find_matches(trigger: str = "celery") -> dict:
    """Run one matching pass inside an application context and return the result body."""
    from lostfound.modules.matching.service import trigger_matching

    with _app().app_context():
        body, _status = trigger_matching(trigger=trigger)
    return body
