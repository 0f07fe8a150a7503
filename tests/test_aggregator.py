"""Tests for record normalization and aggregation."""

import pytest
from decimal import Decimal

from fleettax.domain.aggregator import (
    aggregate,
    average_mpg,
    gallons_by_jurisdiction,
    miles_by_jurisdiction,
    normalize_fuel_purchase,
    normalize_trip,
    normalize_trips,
)
from fleettax.domain.entities import FuelPurchase, Trip
from fleettax.domain.errors import MalformedRecord, ValidationError


def test_aggregate_sample(sample_trips, sample_fuel_purchases):
    aggregation = aggregate(sample_trips, sample_fuel_purchases)

    assert [j.jurisdiction for j in aggregation.jurisdictions] == ["NM", "TX"]
    tx = aggregation.totals_for("TX")
    assert tx.total_miles == Decimal("600.000")
    assert tx.total_gallons == Decimal("200.000")
    assert tx.fuel_cost == Decimal("700.00")
    nm = aggregation.totals_for("NM")
    assert nm.total_miles == Decimal("400.000")
    assert nm.total_gallons == Decimal("0.000")
    assert nm.fuel_cost == Decimal("0.00")

    summary = aggregation.summary
    assert summary.total_miles == Decimal("1000.000")
    assert summary.total_gallons == Decimal("200.000")
    assert summary.average_mpg == Decimal("5.00")
    assert summary.total_fuel_cost == Decimal("700.00")


def test_aggregate_empty_input():
    aggregation = aggregate([], [])
    assert aggregation.jurisdictions == ()
    assert aggregation.summary.total_miles == 0
    assert aggregation.summary.total_gallons == 0
    assert aggregation.summary.average_mpg == 0
    assert aggregation.summary.total_fuel_cost == 0


def test_aggregate_fuel_only_jurisdiction_included():
    aggregation = aggregate(
        [Trip(jurisdiction="TX", miles=Decimal("100"))],
        [FuelPurchase(jurisdiction="NM", gallons=Decimal("20"), cost=Decimal("70"))],
    )
    nm = aggregation.totals_for("NM")
    assert nm.total_miles == 0
    assert nm.total_gallons == Decimal("20.000")


def test_aggregate_is_deterministic(sample_trips, sample_fuel_purchases):
    first = aggregate(sample_trips, sample_fuel_purchases)
    second = aggregate(list(reversed(sample_trips)), sample_fuel_purchases)
    assert first == second


def test_totals_for_missing_code(sample_trips):
    assert aggregate(sample_trips, []).totals_for("OK") is None


def test_miles_without_fuel_gives_zero_mpg():
    aggregation = aggregate([Trip(jurisdiction="TX", miles=Decimal("50"))], [])
    assert aggregation.summary.average_mpg == 0


def test_average_mpg_rounds_half_up():
    assert average_mpg(Decimal("1000"), Decimal("300")) == Decimal("3.33")
    assert average_mpg(Decimal("1"), Decimal("0.8")) == Decimal("1.25")
    assert average_mpg(Decimal("100"), Decimal("0")) == Decimal("0.00")


def test_miles_and_gallons_by_jurisdiction(sample_trips, sample_fuel_purchases):
    trips = normalize_trips(sample_trips)
    assert miles_by_jurisdiction(trips) == {
        "TX": Decimal("600.000"),
        "NM": Decimal("400.000"),
    }
    purchases = [normalize_fuel_purchase(p) for p in sample_fuel_purchases]
    assert gallons_by_jurisdiction(purchases) == {"TX": Decimal("200.000")}


class TestNormalization:
    """Tests for per-record validation."""

    def test_jurisdiction_is_canonicalized(self):
        trip = normalize_trip(Trip(jurisdiction=" nm ", miles=Decimal("1.23456")))
        assert trip.jurisdiction == "NM"
        assert trip.miles == Decimal("1.235")

    def test_float_inputs_are_converted(self):
        purchase = normalize_fuel_purchase(
            FuelPurchase(jurisdiction="TX", gallons=10.5, cost=35.125)
        )
        assert purchase.gallons == Decimal("10.500")
        assert purchase.cost == Decimal("35.13")

    def test_zero_miles_allowed(self):
        assert normalize_trip(Trip(jurisdiction="TX", miles=Decimal("0"))).miles == 0

    def test_negative_miles_rejected_in_batch(self):
        trips = [
            Trip(jurisdiction="TX", miles=Decimal("10")),
            Trip(jurisdiction="TX", miles=Decimal("-1")),
        ]
        with pytest.raises(MalformedRecord) as excinfo:
            aggregate(trips, [])
        assert excinfo.value.index == 1
        assert excinfo.value.field == "miles"
        assert "#1" in str(excinfo.value)

    def test_single_record_error_has_no_index(self):
        with pytest.raises(MalformedRecord) as excinfo:
            normalize_trip(Trip(jurisdiction="TX", miles=Decimal("-5")))
        assert "#" not in str(excinfo.value)

    @pytest.mark.parametrize("field", ["gallons", "cost"])
    def test_negative_fuel_values_rejected(self, field):
        values = {"gallons": Decimal("10"), "cost": Decimal("30")}
        values[field] = Decimal("-0.01")
        with pytest.raises(MalformedRecord) as excinfo:
            aggregate([], [FuelPurchase(jurisdiction="TX", **values)])
        assert excinfo.value.field == field

    def test_negative_fuel_used_rejected(self):
        with pytest.raises(MalformedRecord):
            normalize_trip(
                Trip(jurisdiction="TX", miles=Decimal("10"), fuel_used=Decimal("-2"))
            )

    @pytest.mark.parametrize("value", [None, "ten", float("nan"), True])
    def test_non_numeric_miles_rejected(self, value):
        with pytest.raises(MalformedRecord):
            normalize_trip(Trip(jurisdiction="TX", miles=value))

    @pytest.mark.parametrize("code", ["", "   ", None])
    def test_blank_jurisdiction_rejected(self, code):
        with pytest.raises(MalformedRecord) as excinfo:
            normalize_trip(Trip(jurisdiction=code, miles=Decimal("1")))
        assert "non-empty" in str(excinfo.value)

    def test_malformed_record_is_validation_error(self):
        with pytest.raises(ValidationError):
            normalize_trip(Trip(jurisdiction="TX", miles=Decimal("-1")))
