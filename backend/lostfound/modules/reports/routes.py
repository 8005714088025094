from __future__ import annotations

import logging

from flask import Blueprint, current_app, g, jsonify, request
from marshmallow import ValidationError

from ...extensions import db
from ...matching.types import ReportStatus
from ...models.found_item import FoundItem
from ...models.lost_item import LostItem
from ...schemas.report import FoundReportSchema, LostReportSchema, StatusUpdateSchema

logger = logging.getLogger(__name__)

bp = Blueprint("reports", __name__, url_prefix="/reports")

_MODELS = {"lost": LostItem, "found": FoundItem}
_SCHEMAS = {"lost": LostReportSchema(), "found": FoundReportSchema()}
_REPORT_STATUSES = {s.value for s in ReportStatus}


def _json_error(message: str, status: int = 400):
    return jsonify({"error": message}), status


def _current_user_id() -> int | None:
    uid = getattr(g, "current_user_id", None)
    return int(uid) if uid is not None else None


def report_to_dict(it: LostItem | FoundItem) -> dict:
    is_lost = isinstance(it, LostItem)
    payload = {
        "id": it.id,
        "type": "lost" if is_lost else "found",
        "userId": it.user_id,
        "itemName": it.item_name,
        "category": it.category,
        "description": it.description,
        "imageUrl": it.image_url,
        "status": it.status,
        "createdAt": it.created_at.isoformat() if it.created_at else None,
        "updatedAt": it.updated_at.isoformat() if it.updated_at else None,
    }
    if is_lost:
        payload["locationLost"] = it.location_lost
        payload["dateLost"] = it.date_lost.isoformat() if it.date_lost else None
    else:
        payload["locationFound"] = it.location_found
        payload["dateFound"] = it.date_found.isoformat() if it.date_found else None
    return payload


def _dispatch_matching() -> dict | None:
    """Kick off a matching pass after a new report. Never fails the submission."""
    if not current_app.config.get("MATCH_ON_REPORT"):
        return None
    if current_app.config.get("CELERY_BROKER_URL"):
        from kombu.exceptions import OperationalError
        from ...tasks.jobs.matching import find_matches

        try:
            find_matches.delay(trigger="report")
            return {"queued": True}
        except OperationalError as exc:
            logger.warning("Celery broker unavailable (%s); matching inline", exc)

    from ..matching.service import trigger_matching

    body, status = trigger_matching(trigger="report")
    if status == 409:
        # The run holding the lock scans again before it finishes
        logger.info("Matching busy; report will be scored by the run in progress")
    elif not body.get("success"):
        logger.warning("Matching after report submission failed: %s", body.get("error"))
    return body


def _get_kind(kind: str):
    model = _MODELS.get(kind)
    if model is None:
        return None, _json_error("kind must be 'lost' or 'found'", 404)
    return model, None


@bp.post("/<kind>")
def create_report(kind: str):
    model, err = _get_kind(kind)
    if err:
        return err
    uid = _current_user_id()
    if not uid:
        return _json_error("Authentication required", 401)
    try:
        data = _SCHEMAS[kind].load(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return jsonify({"error": "Invalid report", "fields": exc.messages}), 400

    report = model(user_id=uid, status="pending", **data)
    db.session.add(report)
    db.session.commit()
    logger.info("New %s report %s by user %s", kind, report.id, uid)

    matching = _dispatch_matching()
    return jsonify({"report": report_to_dict(report), "matching": matching}), 201


@bp.get("/<kind>")
def list_reports(kind: str):
    """List reports of one kind.

    Query params:
      - status: pending (default), matched, closed, or 'all'
      - category: exact category
      - userId: reports of one user
      - q: case-insensitive substring of name or description
      - limit: default 100
    """
    model, err = _get_kind(kind)
    if err:
        return err
    q = model.query
    status = (request.args.get("status") or "pending").strip().lower()
    if status != "all":
        if status not in _REPORT_STATUSES:
            return _json_error("Invalid status", 400)
        q = q.filter(model.status == status)
    category = request.args.get("category")
    if category:
        q = q.filter(model.category == category)
    user_id = request.args.get("userId")
    if user_id:
        if not user_id.isdigit():
            return _json_error("Invalid userId", 400)
        q = q.filter(model.user_id == int(user_id))
    text = (request.args.get("q") or "").strip()
    if text:
        like = f"%{text}%"
        q = q.filter(db.or_(model.item_name.ilike(like), model.description.ilike(like)))
    try:
        limit = int(request.args.get("limit", 100))
    except ValueError:
        limit = 100
    rows = q.order_by(model.created_at.desc(), model.id.desc()).limit(max(1, min(500, limit))).all()
    return jsonify({"reports": [report_to_dict(r) for r in rows]})


@bp.get("/<kind>/<int:report_id>")
def get_report(kind: str, report_id: int):
    model, err = _get_kind(kind)
    if err:
        return err
    report = db.session.get(model, report_id)
    if not report:
        return _json_error("Report not found", 404)
    return jsonify({"report": report_to_dict(report)})


def _owned_report(kind: str, report_id: int):
    model, err = _get_kind(kind)
    if err:
        return None, err
    uid = _current_user_id()
    if not uid:
        return None, _json_error("Authentication required", 401)
    report = db.session.get(model, report_id)
    if not report:
        return None, _json_error("Report not found", 404)
    if report.user_id != uid:
        return None, _json_error("Forbidden", 403)
    return report, None


@bp.patch("/<kind>/<int:report_id>/status")
def update_status(kind: str, report_id: int):
    report, err = _owned_report(kind, report_id)
    if err:
        return err
    try:
        data = StatusUpdateSchema().load(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return jsonify({"error": "Invalid status", "fields": exc.messages}), 400
    report.status = data["status"]
    db.session.commit()
    return jsonify({"report": report_to_dict(report)})


@bp.delete("/<kind>/<int:report_id>")
def delete_report(kind: str, report_id: int):
    report, err = _owned_report(kind, report_id)
    if err:
        return err
    db.session.delete(report)
    db.session.commit()
    return jsonify({"deleted": report_id})
