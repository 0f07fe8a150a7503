"""Tests for domain entities."""

import pytest
from dataclasses import FrozenInstanceError
from datetime import date
from decimal import Decimal

from fleettax.domain.entities import (
    IftaPeriodData,
    IftaPeriodSummary,
    Period,
    ReportInfo,
    ReportStatus,
    Trip,
    is_valid_period,
)
from fleettax.domain.errors import InvalidPeriod, ValidationError


class TestPeriod:
    """Tests for Period entity."""

    @pytest.mark.parametrize(
        "quarter,start,end,due",
        [
            (1, date(2025, 1, 1), date(2025, 3, 31), date(2025, 4, 30)),
            (2, date(2025, 4, 1), date(2025, 6, 30), date(2025, 7, 31)),
            (3, date(2025, 7, 1), date(2025, 9, 30), date(2025, 10, 31)),
            (4, date(2025, 10, 1), date(2025, 12, 31), date(2026, 1, 31)),
        ],
    )
    def test_quarter_boundaries(self, quarter, start, end, due):
        period = Period(quarter=quarter, year=2025)
        assert period.start_date == start
        assert period.end_date == end
        assert period.due_date == due

    def test_label(self):
        assert Period(quarter=3, year=2024).label == "2024-Q3"

    def test_contains(self):
        period = Period(quarter=1, year=2025)
        assert period.contains(date(2025, 3, 31))
        assert not period.contains(date(2025, 4, 1))

    @pytest.mark.parametrize(
        "quarter,year",
        [(0, 2025), (5, 2025), (1, 1999), (1, 2101), ("1", 2025), (True, 2025)],
    )
    def test_invalid_period_raises(self, quarter, year):
        with pytest.raises(InvalidPeriod) as excinfo:
            Period(quarter=quarter, year=year)
        assert excinfo.value.quarter == quarter
        assert excinfo.value.year == year

    def test_invalid_period_is_validation_error(self):
        with pytest.raises(ValidationError):
            Period(quarter=9, year=2025)

    def test_is_valid_period(self):
        assert is_valid_period(4, 2000)
        assert not is_valid_period(None, 2025)

    def test_period_immutability(self):
        period = Period(quarter=1, year=2025)
        with pytest.raises(FrozenInstanceError):
            period.quarter = 2


class TestTrip:
    """Tests for Trip entity."""

    def test_defaults(self):
        trip = Trip(jurisdiction="TX", miles=Decimal("10"))
        assert trip.id is None
        assert trip.date is None
        assert trip.fuel_used is None

    def test_to_dict_uses_wire_names(self):
        trip = Trip(jurisdiction="TX", miles=Decimal("10"), vehicle_id=3, date=date(2025, 1, 2))
        data = trip.to_dict()
        assert data["distance"] == Decimal("10")
        assert data["vehicleId"] == 3
        assert data["date"] == date(2025, 1, 2)


class TestIftaPeriodData:
    """Tests for the period aggregate root."""

    def test_to_dict_shape(self):
        data = IftaPeriodData(
            period=Period(quarter=1, year=2025),
            summary=IftaPeriodSummary(
                total_miles=Decimal("0"),
                total_gallons=Decimal("0"),
                average_mpg=Decimal("0"),
                total_fuel_cost=Decimal("0"),
            ),
        )
        assert data.to_dict() == {
            "period": {"quarter": 1, "year": 2025},
            "summary": {
                "totalMiles": 0,
                "totalGallons": 0,
                "averageMpg": 0,
                "totalFuelCost": 0,
            },
            "trips": [],
            "fuelPurchases": [],
            "jurisdictionSummary": [],
            "report": None,
        }

    def test_report_serializes_status_value(self):
        info = ReportInfo(id=7, status=ReportStatus.SUBMITTED, submitted_at=None, due_date=None)
        assert info.to_dict()["status"] == "submitted"
