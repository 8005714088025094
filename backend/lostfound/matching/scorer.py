"""Similarity score between one lost report and one found report.

Four independent signals each add a fixed number of points. The total is
deliberately left unclamped, so a pair firing every signal scores 110.
"""
from __future__ import annotations

from .types import FoundReport, LostReport, MatchScore

CATEGORY_POINTS = 40
NAME_POINTS = 30
KEYWORD_POINTS = 5
KEYWORD_CAP = 30
DATE_POINTS = 10

MIN_KEYWORD_LENGTH = 4
DATE_WINDOW_DAYS = 7


def _keywords(text: str | None) -> set[str]:
    return {w for w in (text or "").lower().split() if len(w) >= MIN_KEYWORD_LENGTH}


def names_similar(lost_name: str, found_name: str) -> bool:
    a = (lost_name or "").lower()
    b = (found_name or "").lower()
    return a in b or b in a


def shared_keywords(lost_desc: str | None, found_desc: str | None) -> set[str]:
    return _keywords(lost_desc) & _keywords(found_desc)


def score_pair(lost: LostReport, found: FoundReport) -> MatchScore:
    score = 0
    reasons: list[str] = []

    if lost.category == found.category:
        score += CATEGORY_POINTS
        reasons.append(f"Same category ({lost.category})")

    if names_similar(lost.item_name, found.item_name):
        score += NAME_POINTS
        reasons.append("Similar item name")

    common = shared_keywords(lost.description, found.description)
    if common:
        score += min(KEYWORD_CAP, len(common) * KEYWORD_POINTS)
        reasons.append(f"{len(common)} matching keywords in description")

    if abs((lost.date_lost - found.date_found).days) <= DATE_WINDOW_DAYS:
        score += DATE_POINTS
        reasons.append("Dates are close")

    return MatchScore(score=score, reason=", ".join(reasons))
