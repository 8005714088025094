from __future__ import annotations

import json
import time
from queue import Empty

from flask import Blueprint, Response, g, jsonify, request, stream_with_context

from ...extensions import db
from ...models.notification import Notification
from .bus import subscribe, unsubscribe

bp = Blueprint("notifications", __name__, url_prefix="/notifications")


def _json_error(message: str, status: int = 400):
    return jsonify({"error": message}), status


def notif_to_dict(n: Notification) -> dict:
    return {
        "id": n.id,
        "userId": n.user_id,
        "title": n.title,
        "message": n.message,
        "type": n.type,
        "read": bool(n.read),
        "relatedItemId": n.related_item_id,
        "createdAt": n.created_at.isoformat() if n.created_at else None,
    }


def _target_user_id() -> int | None:
    """Authenticated user, else an explicit userId query param."""
    uid = getattr(g, "current_user_id", None)
    if uid:
        return int(uid)
    raw = request.args.get("userId")
    if raw and raw.isdigit():
        return int(raw)
    return None


def _owned_notification(notif_id: int):
    # Changes need an authenticated owner; a userId query param is not enough
    uid = getattr(g, "current_user_id", None)
    if uid is None:
        return None, _json_error("Authentication required", 401)
    n = db.session.get(Notification, notif_id)
    if not n:
        return None, _json_error("Not found", 404)
    if n.user_id != int(uid):
        return None, _json_error("Forbidden", 403)
    return n, None


@bp.get("")
def list_notifications():
    uid = _target_user_id()
    if uid is None:
        return _json_error("userId required", 400)
    try:
        limit = int(request.args.get("limit", 20))
    except ValueError:
        limit = 20
    q = Notification.query.filter(Notification.user_id == uid)
    if request.args.get("unreadOnly") in ("1", "true", "yes"):
        q = q.filter(Notification.read.is_(False))
    rows = q.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(max(1, min(100, limit))).all()
    unread = Notification.query.filter(Notification.user_id == uid, Notification.read.is_(False)).count()
    return jsonify({"notifications": [notif_to_dict(n) for n in rows], "unreadCount": unread})


@bp.patch("/<int:notif_id>/read")
def mark_read(notif_id: int):
    n, err = _owned_notification(notif_id)
    if err:
        return err
    if not n.read:
        n.read = True
        db.session.commit()
    return jsonify({"notification": notif_to_dict(n)})


@bp.post("/read-all")
def mark_all_read():
    uid = _target_user_id()
    if uid is None:
        return _json_error("userId required", 400)
    updated = (
        Notification.query
        .filter(Notification.user_id == uid, Notification.read.is_(False))
        .update({Notification.read: True}, synchronize_session=False)
    )
    db.session.commit()
    return jsonify({"updated": updated})


@bp.delete("/<int:notif_id>")
def delete_notification(notif_id: int):
    n, err = _owned_notification(notif_id)
    if err:
        return err
    db.session.delete(n)
    db.session.commit()
    return jsonify({"deleted": notif_id})


@bp.get("/stream")
def stream_notifications():
    """Server-Sent Events stream of new notifications for one user.

    Client subscribes with /notifications/stream?userId=<id>
    """
    uid = _target_user_id()
    if uid is None:
        return _json_error("userId required", 400)

    q = subscribe(uid)

    def event_stream():
        try:
            # Initial comment to establish stream
            yield ": connected\n\n"
            while True:
                try:
                    # Keep below gunicorn's timeout to ensure periodic yields
                    evt = q.get(timeout=15)
                except Empty:
                    yield "event: ping\n" + f"data: {json.dumps({'ts': int(time.time())})}\n\n"
                    continue
                yield "event: notification\n" + f"data: {json.dumps(evt)}\n\n"
        finally:
            unsubscribe(uid, q)

    headers = {
        "Content-Type": "text/event-stream",
        "Cache-Control": "no-cache",
        "Connection": "keep-alive",
        "X-Accel-Buffering": "no",
    }
    return Response(stream_with_context(event_stream()), headers=headers)
