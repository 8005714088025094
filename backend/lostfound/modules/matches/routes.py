from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from ...extensions import db
from ...matching.types import MatchStatus
from ...models.found_item import FoundItem
from ...models.lost_item import LostItem
from ...models.match import Match
from ..reports.routes import report_to_dict

bp = Blueprint("matches", __name__, url_prefix="/matches")


def _json_error(message: str, status: int = 400):
    return jsonify({"error": message}), status


def match_to_dict(m: Match, include_items: bool = False) -> dict:
    base = {
        "id": m.id,
        "lostItemId": m.lost_item_id,
        "foundItemId": m.found_item_id,
        "matchScore": m.match_score,
        "matchReason": m.match_reason,
        "status": m.status,
        "createdAt": m.created_at.isoformat() if m.created_at else None,
    }
    if include_items:
        base["lostItem"] = report_to_dict(m.lost_item) if m.lost_item else None
        base["foundItem"] = report_to_dict(m.found_item) if m.found_item else None
    return base


@bp.get("")
def list_matches():
    # Optional filters: lostItemId, foundItemId, status, userId (owner of either side)
    q = Match.query
    include_items = request.args.get("includeItems") in ("1", "true", "yes")
    try:
        limit = int(request.args.get("limit", 200))
    except ValueError:
        limit = 200
    for param, column in (("lostItemId", Match.lost_item_id), ("foundItemId", Match.found_item_id)):
        raw = request.args.get(param)
        if raw:
            if not raw.isdigit():
                return _json_error(f"Invalid {param}", 400)
            q = q.filter(column == int(raw))
    status = request.args.get("status")
    if status:
        if status not in {s.value for s in MatchStatus}:
            return _json_error("Invalid status", 400)
        q = q.filter(Match.status == status)
    user_id = request.args.get("userId")
    if user_id:
        if not user_id.isdigit():
            return _json_error("Invalid userId", 400)
        uid = int(user_id)
        q = (
            q.join(LostItem, Match.lost_item_id == LostItem.id)
            .join(FoundItem, Match.found_item_id == FoundItem.id)
            .filter(db.or_(LostItem.user_id == uid, FoundItem.user_id == uid))
        )
    rows = q.order_by(Match.created_at.desc(), Match.id.desc()).limit(max(1, min(500, limit))).all()
    return jsonify({"matches": [match_to_dict(m, include_items) for m in rows]})


def _decidable_match(match_id: int):
    m = db.session.get(Match, match_id)
    if not m:
        return None, _json_error("Match not found", 404)
    uid = getattr(g, "current_user_id", None)
    if uid is None:
        return None, _json_error("Authentication required", 401)
    if uid not in (m.lost_item.user_id, m.found_item.user_id):
        return None, _json_error("Forbidden", 403)
    return m, None


@bp.post("/<int:match_id>/confirm")
def confirm_match(match_id: int):
    m, err = _decidable_match(match_id)
    if err:
        return err
    m.status = "confirmed"
    # Confirmation resolves both reports so later runs skip them
    for report in (m.lost_item, m.found_item):
        if report.status == "pending":
            report.status = "matched"
    db.session.commit()
    return jsonify({"match": match_to_dict(m, include_items=True)})


@bp.post("/<int:match_id>/reject")
def reject_match(match_id: int):
    m, err = _decidable_match(match_id)
    if err:
        return err
    m.status = "rejected"
    db.session.commit()
    return jsonify({"match": match_to_dict(m)})
