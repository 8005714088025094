"""Tests for the four-signal pair scorer."""
from datetime import date, timedelta

import pytest

from lostfound.matching import MatchScore, score_pair
from tests.mocks.reports import BASE_DATE, found_report, lost_report


def test_unrelated_pair_scores_zero_with_empty_reason():
    result = score_pair(lost_report(), found_report())
    assert result == MatchScore(score=0, reason="")


def test_scenario_phone_near_library():
    lost = lost_report(
        category="Electronics",
        item_name="iPhone 13",
        description="black iphone with cracked screen",
        date_lost=BASE_DATE,
    )
    found = found_report(
        category="Electronics",
        item_name="iPhone",
        description="found a black phone cracked screen near library",
        date_found=BASE_DATE + timedelta(days=2),
    )

    result = score_pair(lost, found)

    # 40 category + 30 name + 3 keywords (black, cracked, screen) * 5 + 10 date
    assert result.score == 95
    assert result.reason == (
        "Same category (Electronics), Similar item name, "
        "3 matching keywords in description, Dates are close"
    )


def test_category_comparison_is_case_sensitive():
    result = score_pair(lost_report(category="Electronics"), found_report(category="electronics"))
    assert result.score == 0


@pytest.mark.parametrize(
    "lost_name,found_name,similar",
    [
        ("iPhone 13", "iphone", True),
        ("wallet", "Brown Leather WALLET", True),
        ("Wallet", "Wallet", True),
        ("Wallet", "Purse", False),
        ("Water bottle", "bottle cap", False),
    ],
)
def test_name_similarity_is_case_insensitive_substring(lost_name, found_name, similar):
    result = score_pair(lost_report(item_name=lost_name), found_report(item_name=found_name))
    assert (result.score == 30) is similar
    assert ("Similar item name" in result.reason) is similar


def test_short_words_do_not_count_as_keywords():
    result = score_pair(lost_report(description="a red pen"), found_report(description="the red pen"))
    assert result.score == 0
    assert result.reason == ""


def test_repeated_words_count_once():
    result = score_pair(
        lost_report(description="blue blue blue backpack"),
        found_report(description="Blue BACKPACK backpack"),
    )
    assert result.score == 10
    assert result.reason == "2 matching keywords in description"


def test_keyword_points_are_capped_at_thirty():
    words = "alpha bravo charlie delta foxtrot hotel india"
    result = score_pair(lost_report(description=words), found_report(description=words.upper()))
    assert result.score == 30
    assert result.reason == "7 matching keywords in description"


@pytest.mark.parametrize("gap,close", [(0, True), (7, True), (-7, True), (8, False), (-8, False)])
def test_date_window_is_seven_days_either_side(gap, close):
    lost = lost_report(date_lost=BASE_DATE)
    found = found_report(date_found=BASE_DATE + timedelta(days=gap))
    result = score_pair(lost, found)
    assert (result.score == 10) is close


def test_total_is_not_clamped_at_one_hundred():
    words = "alpha bravo charlie delta foxtrot hotel"
    lost = lost_report(category="Bags", item_name="Backpack", description=words, date_lost=date(2026, 3, 1))
    found = found_report(category="Bags", item_name="backpack", description=words, date_found=date(2026, 3, 1))
    assert score_pair(lost, found).score == 110


def test_scoring_is_deterministic():
    lost = lost_report(category="Keys", item_name="Car keys", description="toyota keys with keychain")
    found = found_report(category="Keys", item_name="keys", description="keys keychain found")
    assert score_pair(lost, found) == score_pair(lost, found)


@pytest.mark.parametrize(
    "lost_changes,found_changes,points",
    [
        ({"category": "Clothing"}, {}, 40),
        ({"item_name": "Scarf"}, {}, 30),
        ({"description": "woolen blue winter mittens knitted"}, {"description": "woolen blue winter mittens knitted"}, 25),
        ({"date_lost": BASE_DATE + timedelta(days=25)}, {}, 10),
    ],
    ids=["category", "name", "keywords", "date"],
)
def test_each_signal_adds_its_fixed_contribution(lost_changes, found_changes, points):
    base_lost = lost_report()
    base_found = found_report()
    base = score_pair(base_lost, base_found).score

    lost = lost_report(**{**base_lost.__dict__, **lost_changes})
    found = found_report(**{**base_found.__dict__, **found_changes})

    assert score_pair(lost, found).score == base + points
