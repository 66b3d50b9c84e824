"""Tests for per-location statistics."""

from datetime import date

from conftest import report
from reclaim.analytics.hotspots import (
    LocationStat,
    analyze_hotspots,
    location_risk,
    location_stats,
    predict_item_location,
)


def _items(location: str, lost: int, found: int, category: str = "Electronics"):
    return (
        [report(type="lost", location=location, category=category) for _ in range(lost)]
        + [report(type="found", location=location, category=category) for _ in range(found)]
    )


class TestLocationStat:
    def test_rates(self):
        stat = LocationStat("Gym", lost_count=2, found_count=1)
        assert stat.total_reports == 3
        assert stat.loss_probability == 67
        assert stat.recovery_rate == 50

    def test_no_lost_items(self):
        stat = LocationStat("Gym", lost_count=0, found_count=4)
        assert stat.recovery_rate == 0
        assert stat.loss_probability == 0

    def test_recovery_can_exceed_hundred(self):
        assert LocationStat("Desk", lost_count=1, found_count=3).recovery_rate == 300


class TestAnalyzeHotspots:
    def test_empty(self):
        result = analyze_hotspots([])
        assert result.per_location == []
        assert result.high_risk == []
        assert result.high_recovery == []

    def test_classification(self):
        items = _items("Gym", lost=4, found=1) + _items("Library", lost=1, found=2) + _items("Cafe", 1, 0)
        result = analyze_hotspots(items)
        assert [s.location for s in result.per_location] == ["Gym", "Library", "Cafe"]
        assert {s.location for s in result.high_risk} == {"Gym", "Cafe"}
        assert [s.location for s in result.high_recovery] == ["Library"]

    def test_boundaries_are_strict(self):
        # 60% lost is not high-risk, 50% recovery is not high-recovery
        items = _items("Hall", lost=3, found=2) + _items("Lab", lost=2, found=1)
        result = analyze_hotspots(items)
        assert result.high_risk == [s for s in result.per_location if s.location == "Lab"]
        assert result.high_recovery == [s for s in result.per_location if s.location == "Hall"]

    def test_exact_string_grouping(self):
        items = _items("Library", 1, 0) + _items("library", 1, 0)
        assert len(analyze_hotspots(items).per_location) == 2

    def test_skips_missing_location(self):
        items = _items("", 2, 0) + [report(type="lost", location=None)]
        assert analyze_hotspots(items).per_location == []


class TestLocationStats:
    def test_summary(self):
        items = _items("Gym", 2, 1) + _items("Gym", 1, 0, category="Clothing") + _items("Library", 5, 5)
        summary = location_stats("Gym", items)
        assert summary.total_reports == 4
        assert summary.lost_items == 3
        assert summary.found_items == 1
        assert summary.most_common_categories == [("Electronics", 3), ("Clothing", 1)]

    def test_unknown_location(self):
        summary = location_stats("Nowhere", _items("Gym", 1, 1))
        assert summary.total_reports == 0
        assert summary.most_common_categories == []

    def test_risk(self):
        items = _items("Gym", 3, 1)
        assert location_risk("Gym", items) == 75
        assert location_risk("Nowhere", items) == 0
        assert location_risk("Gym", _items("Gym", 0, 3)) == 0


class TestPredictLocation:
    def test_recent_same_category(self):
        lost = report(type="lost", category="Electronics", date=date(2026, 1, 10))
        items = [
            report(type="found", category="Electronics", location="Library", date=date(2026, 1, 11)),
            report(type="found", category="Electronics", location="Library", date=date(2026, 1, 12)),
            report(type="found", category="Electronics", location="Gym", date=date(2026, 1, 9)),
            report(type="found", category="Electronics", location="Cafe", date=date(2026, 2, 20)),
            report(type="found", category="Clothing", location="Cafe", date=date(2026, 1, 10)),
            report(type="lost", category="Electronics", location="Cafe", date=date(2026, 1, 10)),
        ]
        predictions = predict_item_location(lost, items)
        assert [(p.location, p.similar_items_found) for p in predictions] == [("Library", 2), ("Gym", 1)]
        assert predictions[0].confidence == 67
        assert predictions[1].confidence == 33

    def test_no_similar(self):
        lost = report(type="lost", category="Books", date=date(2026, 1, 10))
        assert predict_item_location(lost, []) == []
