from __future__ import annotations

from flask import Blueprint, jsonify, request

from ...models.match_run import MatchRun
from .service import run_to_dict, trigger_matching

bp = Blueprint("matching", __name__)


@bp.post("/matching/run")
@bp.post("/find-matches")
def run_matching():
    """Run one matching pass over all pending reports.

    Returns {success, matchesFound, message} or {success: false, error}.
    """
    body, status = trigger_matching(trigger="api")
    return jsonify(body), status


@bp.get("/matching/runs")
def list_runs():
    try:
        limit = int(request.args.get("limit", 20))
    except ValueError:
        limit = 20
    rows = MatchRun.query.order_by(MatchRun.id.desc()).limit(max(1, min(200, limit))).all()
    return jsonify({"runs": [run_to_dict(r) for r in rows]})
