"""
Unit tests for region resolution.

Run with: python -m pytest tests/test_regions.py -v
"""

from coverage_engine import compute_region_metrics
from models import CenterPoint, RegionAggregate
from regions import (
    NATION,
    STATE_CODES,
    STATE_NAMES,
    center_region,
    get_display_name,
    list_cities,
    list_regions,
    match_aggregate,
    normalize_region,
    resolve_region,
)


class TestStateLookup:

    def test_table_covers_states_dc_and_nation(self):
        assert len(STATE_NAMES) == 52
        assert STATE_NAMES["DC"] == "District of Columbia"
        assert STATE_NAMES[NATION] == "United States"

    def test_reverse_lookup(self):
        assert STATE_CODES["NEW YORK"] == "NY"
        assert all(STATE_NAMES[code].upper() == name for name, code in STATE_CODES.items())

    def test_display_name_falls_back_to_code(self):
        assert get_display_name("PA") == "Pennsylvania"
        assert get_display_name("PR") == "PR"

    def test_normalize_region(self):
        assert normalize_region(" pa ") == "PA"
        assert normalize_region("new   york") == "NY"
        assert normalize_region("") is None
        assert normalize_region(None) is None


class TestAggregateMatching:

    AGGREGATES = (
        RegionAggregate(city="Philadelphia", region="PA", latitude=39.95, longitude=-75.19),
        RegionAggregate(city="Nowhere", region="XX", latitude=None, longitude=None),
    )

    def test_match_within_tolerance(self):
        match = match_aggregate(39.955, -75.185, self.AGGREGATES)
        assert match is not None
        assert match.city == "Philadelphia"

    def test_no_match_outside_tolerance(self):
        assert match_aggregate(39.97, -75.19, self.AGGREGATES) is None
        assert match_aggregate(39.95, -75.21, self.AGGREGATES) is None

    def test_missing_coordinates_never_match(self):
        assert match_aggregate(None, -75.19, self.AGGREGATES) is None

    def test_own_region_code_wins(self):
        center = CenterPoint(name="C", region="NJ", latitude=39.95, longitude=-75.19)
        assert center_region(center, self.AGGREGATES) == "NJ"

    def test_region_from_aggregate(self):
        center = CenterPoint(name="C", latitude=39.951, longitude=-75.191)
        assert center_region(center, self.AGGREGATES) == "PA"

    def test_unplaceable_center(self):
        center = CenterPoint(name="C", latitude=10.0, longitude=10.0)
        assert center_region(center, self.AGGREGATES) is None


class TestResolveRegion:

    def test_nation_returns_unfiltered_sets(self, snapshot):
        selection = resolve_region(snapshot, NATION)

        assert selection.is_nation
        assert selection.stores == snapshot.stores
        assert selection.centers == snapshot.centers
        assert selection.display_name == "United States"

    def test_missing_region_means_nation(self, snapshot):
        assert resolve_region(snapshot, None).is_nation

    def test_state_filters_stores_and_centers(self, snapshot):
        selection = resolve_region(snapshot, "PA")

        assert {s.name for s in selection.stores} == {"Philly", "Wellsboro", "No Lat"}
        assert {c.name for c in selection.centers} == {"Penn", "Allegheny", "Unlocated"}
        assert [a.city for a in selection.aggregates] == ["Philadelphia"]
        assert selection.display_name == "Pennsylvania"

    def test_full_state_name_is_accepted(self, snapshot):
        assert resolve_region(snapshot, "Texas").region == "TX"

    def test_unknown_region_is_empty(self, snapshot):
        selection = resolve_region(snapshot, "ZZ")

        assert selection.is_empty
        assert selection.display_name == "ZZ"

    def test_malformed_region_is_empty(self, snapshot):
        for value in ("P1", "PAX", "Pennsylvania Avenue"):
            selection = resolve_region(snapshot, value)

            assert selection.is_empty
            assert not selection.is_nation
            assert selection.aggregates == ()

    def test_malformed_region_gives_zero_metrics(self, snapshot):
        result = compute_region_metrics(snapshot, "P1", 35)

        assert result.total_stores == 0
        assert result.total_centers == 0


class TestListings:

    def test_list_regions_sorted_distinct(self, snapshot):
        assert list_regions(snapshot) == ["PA", "TX"]

    def test_list_cities(self, snapshot):
        assert list_cities(snapshot) == ["Houston", "Philadelphia"]
        assert list_cities(snapshot, "tx") == ["Houston"]
        assert list_cities(snapshot, NATION) == ["Houston", "Philadelphia"]
