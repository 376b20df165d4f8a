import pytest

from nasa_explorer.neo import (
    NeoAggregator,
    close_approach,
    format_diameter_range,
    format_distance,
    format_velocity,
    max_diameter_km,
)
from tests.factories import neo_object


def test_flatten_merges_dates_and_sorts_by_diameter():
    feed = {
        "2024-01-01": [neo_object("a", 0.2), neo_object("b", 1.5)],
        "2024-01-02": [neo_object("c", 0.9)],
    }
    objects = NeoAggregator(feed).flatten()
    assert [neo["id"] for neo in objects] == ["b", "c", "a"]


def test_flatten_keeps_encounter_order_for_equal_diameters():
    feed = {
        "2024-01-01": [neo_object("first", 0.3), neo_object("big", 2.0)],
        "2024-01-02": [neo_object("second", 0.3), neo_object("third", 0.3)],
    }
    objects = NeoAggregator(feed).flatten()
    assert [neo["id"] for neo in objects] == ["big", "first", "second", "third"]


def test_flatten_parses_string_diameters():
    feed = {"2024-01-01": [neo_object("small", "0.10", diameter_min="0.05"), neo_object("large", "2.5", diameter_min="1.1")]}
    assert [neo["id"] for neo in NeoAggregator(feed).flatten()] == ["large", "small"]


def test_flatten_does_not_mutate_the_feed():
    day = [neo_object("a", 0.1), neo_object("b", 0.5)]
    NeoAggregator({"2024-01-01": day}).flatten()
    assert [neo["id"] for neo in day] == ["a", "b"]


def test_stats_summarise_the_feed():
    feed = {
        "2024-01-01": [neo_object("a", 1.0, hazardous=True), neo_object("b", 0.5)],
        "2024-01-02": [neo_object("c", 0.25, hazardous=True)],
    }
    stats = NeoAggregator(feed).stats()
    assert stats.total == 3
    assert stats.hazardous == 2
    assert stats.avg_diameter == "0.58"
    assert stats.largest["id"] == "a"


def test_stats_of_empty_feed():
    stats = NeoAggregator({}).stats()
    assert stats.total == 0
    assert stats.hazardous == 0
    assert stats.avg_diameter == "N/A"
    assert stats.largest is None


def test_from_feed_tolerates_missing_payload():
    assert NeoAggregator.from_feed(None).flatten() == []
    assert NeoAggregator.from_feed({"element_count": 0}).stats().total == 0


@pytest.mark.parametrize("distance,expected", [
    (500, "500 km"),
    ("384400.123456", "384,400.123 km"),
    (999999.5, "999,999.5 km"),
    (1_000_000, "1.00M km"),
    (2_500_000, "2.50M km"),
    ("45678901.2", "45.68M km"),
])
def test_format_distance(distance, expected):
    assert format_distance(distance) == expected


def test_format_velocity():
    assert format_velocity(12.3456) == "12.35 km/s"
    assert format_velocity("7.1") == "7.10 km/s"


def test_record_helpers():
    neo = neo_object("a", 0.2712, diameter_min=0.1213)
    assert max_diameter_km(neo) == pytest.approx(0.2712)
    assert format_diameter_range(neo) == "0.12 - 0.27 km"
    assert close_approach(neo)["relative_velocity"]["kilometers_per_second"] == "12.5"
    assert close_approach({"close_approach_data": []}) == {}
