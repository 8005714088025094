import os
from celery import Celery


def make_celery() -> Celery:
    broker = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
    backend = os.getenv("CELERY_RESULT_BACKEND", broker)
    app = Celery("lostfound", broker=broker, backend=backend, include=[
        "lostfound.tasks.jobs.matching",
    ])
    app.conf.update(task_track_started=True)

    # Periodic matching pass; disabled unless MATCH_SCHEDULE_SECONDS > 0
    interval = int(os.getenv("MATCH_SCHEDULE_SECONDS", "0") or 0)
    if interval > 0:
        app.conf.beat_schedule = {
            "find-matches": {
                "task": "lostfound.find_matches",
                "schedule": float(interval),
                "kwargs": {"trigger": "schedule"},
            },
        }
    return app

celery_app = make_celery()
