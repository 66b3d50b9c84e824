"""Tests for the multi-factor item similarity score."""

from datetime import date, datetime

import pytest

from conftest import FOUND_IPHONE, LOST_IPHONE, report
from reclaim.matching.scorer import (
    date_proximity_points,
    days_apart,
    round_half_up,
    score_breakdown,
    score_items,
    to_date,
)


class TestHelpers:
    def test_round_half_up(self):
        assert round_half_up(76.5) == 77
        assert round_half_up(76.49) == 76
        assert round_half_up(0.5) == 1

    def test_to_date(self):
        assert to_date("2026-01-10") == date(2026, 1, 10)
        assert to_date("2026-01-10T08:30:00") == date(2026, 1, 10)
        assert to_date(datetime(2026, 1, 10, 8, 30)) == date(2026, 1, 10)
        assert to_date("not a date") is None
        assert to_date("") is None
        assert to_date(None) is None

    def test_days_apart(self):
        assert days_apart("2026-01-10", date(2026, 1, 13)) == 3
        assert days_apart(date(2026, 1, 13), "2026-01-10") == 3
        assert days_apart(None, "2026-01-10") is None

    @pytest.mark.parametrize("days,points", [
        (0, 15), (1, 15), (2, 10), (3, 10), (4, 5), (7, 5), (8, 0), (365, 0),
    ])
    def test_date_proximity(self, days, points):
        assert date_proximity_points(days) == points


class TestScoreBreakdown:
    def test_iphone_scenario(self):
        lost = report(**LOST_IPHONE)
        found = report(**FOUND_IPHONE)
        b = score_breakdown(lost, found)
        assert b.category == 30
        assert b.name == 17            # 9/13 of 25
        assert b.color == 10           # "blue"
        assert b.shared_colors == ["blue"]
        assert b.location == 12        # 15/26 of 20
        assert b.date == 15
        assert b.max_points == 110
        assert b.score == 76           # 84/110

    def test_iphone_scenario_clears_threshold(self):
        assert score_items(report(**LOST_IPHONE), report(**FOUND_IPHONE)) >= 60

    def test_argument_order_bounded(self):
        a = report(**LOST_IPHONE)
        b = report(**FOUND_IPHONE)
        assert abs(score_items(a, b) - score_items(b, a)) <= 2

    def test_missing_factor_excluded(self):
        a = report(item_name="Blue Umbrella", category="")
        b = report(item_name="Blue Umbrella", category="Accessories")
        breakdown = score_breakdown(a, b)
        assert breakdown.evaluated == ["name"]
        assert breakdown.score == 100

    def test_zero_earned_still_counts(self):
        a = report(item_name="Notebook", category="books")
        b = report(item_name="Notebook", category="phone")
        # (0 + 25) / (30 + 25)
        assert score_items(a, b) == 45

    def test_nothing_comparable(self):
        assert score_items(report(), report()) == 0

    def test_category_group(self):
        a = report(category="phone")
        b = report(category="laptop")
        assert score_breakdown(a, b).category == 15

    def test_category_exact_case_sensitive(self):
        assert score_breakdown(report(category="Wallet"), report(category="Wallet")).category == 30

    def test_colors_capped(self):
        a = report(description="red, blue and green stripes")
        b = report(description="green blue red pattern")
        breakdown = score_breakdown(a, b)
        assert breakdown.color == 20
        assert breakdown.score == 100

    def test_description_without_colors_counts(self):
        a = report(description="leather", item_name="Wallet")
        b = report(description="leather", item_name="Wallet")
        # color factor evaluated (both descriptions present) but earns nothing
        assert score_items(a, b) == round_half_up(25 / 45 * 100)

    def test_unparseable_date_excluded(self):
        a = report(item_name="Keys", date="soon")
        b = report(item_name="Keys", date="2026-01-10")
        breakdown = score_breakdown(a, b)
        assert "date" not in breakdown.evaluated
        assert breakdown.score == 100

    def test_missing_attributes(self):
        class Bare:
            item_name = "Keys"

        assert score_items(Bare(), report(item_name="Keys")) == 100

    def test_score_range(self):
        a = report(**LOST_IPHONE)
        for other in (report(**FOUND_IPHONE), report(item_name="x"), report(location="Gym")):
            assert 0 <= score_items(a, other) <= 100
