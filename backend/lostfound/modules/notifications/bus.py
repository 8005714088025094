from __future__ import annotations

import logging
from queue import Full, Queue
from threading import Lock
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

# In-memory pub/sub feeding the SSE stream. Single process only; the
# notifications table stays the source of truth.
_subs: dict[int, List[Queue]] = {}
_lock = Lock()


def subscribe(user_id: int) -> Queue:
    q: Queue = Queue(maxsize=100)
    with _lock:
        _subs.setdefault(user_id, []).append(q)
    return q


def unsubscribe(user_id: int, q: Queue) -> None:
    with _lock:
        arr = _subs.get(user_id)
        if not arr:
            return
        if q in arr:
            arr.remove(q)
        if not arr:
            _subs.pop(user_id, None)


def publish(user_id: int, event: Dict[str, Any]) -> int:
    """Deliver an event to the user's open streams. Returns how many received it."""
    with _lock:
        arr = list(_subs.get(user_id, []))
    delivered = 0
    for q in arr:
        try:
            q.put_nowait(event)
            delivered += 1
        except Full:
            logger.warning("Dropping notification event for user %s: stream queue full", user_id)
    return delivered
