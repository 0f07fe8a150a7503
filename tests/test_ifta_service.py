"""Tests for the IFTA service against a real database."""

import logging
import pytest
from datetime import date
from decimal import Decimal

from fleettax.domain.entities import RateMode, ReportStatus
from fleettax.domain.errors import (
    ConflictError,
    InvalidPeriod,
    MalformedRecord,
    NotFoundError,
    UnknownJurisdiction,
    ValidationError,
)
from fleettax.domain.ifta import IftaService, period_cache_key
from fleettax.domain.entities import Period
from fleettax.domain.report import validate_ifta_period_data
from fleettax.utils.request_cache import RequestCache


class TestRecordLogging:
    """Tests for logging trips and fuel purchases."""

    def test_log_trip_normalizes(self, ifta_service, sample_vehicle):
        org_id = sample_vehicle.organization_id
        ifta_service.log_trip(org_id, sample_vehicle.id, date(2025, 1, 3), " nm ", Decimal("12.3456"))

        trip = ifta_service.list_trips(org_id)[0]
        assert trip.jurisdiction == "NM"
        assert trip.miles == Decimal("12.346")

    def test_negative_miles_rejected(self, ifta_service, sample_vehicle):
        with pytest.raises(MalformedRecord):
            ifta_service.log_trip(
                sample_vehicle.organization_id,
                sample_vehicle.id,
                date(2025, 1, 3),
                "TX",
                Decimal("-1"),
            )
        assert ifta_service.list_trips(sample_vehicle.organization_id) == []

    def test_negative_cost_rejected(self, ifta_service, sample_vehicle):
        with pytest.raises(MalformedRecord):
            ifta_service.log_fuel_purchase(
                sample_vehicle.organization_id,
                sample_vehicle.id,
                date(2025, 1, 3),
                "TX",
                Decimal("10"),
                Decimal("-5"),
            )

    def test_vehicle_from_other_organization(
        self, ifta_service, organization_service, sample_vehicle
    ):
        other_id = organization_service.create_organization("Other Fleet")
        with pytest.raises(NotFoundError):
            ifta_service.log_trip(other_id, sample_vehicle.id, date(2025, 1, 3), "TX", Decimal("1"))

    def test_list_filters(self, ifta_service, logged_quarter):
        tx = ifta_service.list_trips(logged_quarter, jurisdiction="tx")
        assert len(tx) == 2
        january = ifta_service.list_fuel_purchases(
            logged_quarter, start_date=date(2025, 1, 1), end_date=date(2025, 1, 31)
        )
        assert [p.gallons for p in january] == [Decimal("120.000")]

    def test_delete_trip(self, ifta_service, logged_quarter):
        trip_id = ifta_service.list_trips(logged_quarter)[0].id
        ifta_service.delete_trip(logged_quarter, trip_id)
        with pytest.raises(NotFoundError):
            ifta_service.delete_trip(logged_quarter, trip_id)

    def test_delete_missing_fuel_purchase(self, ifta_service, logged_quarter):
        with pytest.raises(NotFoundError) as excinfo:
            ifta_service.delete_fuel_purchase(logged_quarter, 9999)
        assert "Fuel purchase 9999" in str(excinfo.value)

    def test_missing_organization(self, ifta_service):
        with pytest.raises(NotFoundError):
            ifta_service.list_trips(77)


class TestPeriodData:
    """Tests for building a quarter's IFTA data."""

    def test_quarter_boundaries(self, ifta_service, logged_quarter):
        data = ifta_service.get_period_data(logged_quarter, 1, 2025)

        # March 31 is in, April 1 is out
        assert data.summary.total_miles == Decimal("1000.000")
        assert data.summary.total_gallons == Decimal("200.000")
        assert data.summary.average_mpg == Decimal("5.00")
        assert data.summary.total_fuel_cost == Decimal("700.00")
        assert len(data.trips) == 3
        assert validate_ifta_period_data(data)

    def test_tax_lines(self, ifta_service, logged_quarter):
        data = ifta_service.get_period_data(logged_quarter, 1, 2025)
        lines = {line.jurisdiction: line for line in data.jurisdiction_summary}
        assert lines["TX"].tax_owed == Decimal("-16.00")
        assert lines["NM"].tax_owed == Decimal("13.60")

    def test_next_quarter_without_fuel(self, ifta_service, logged_quarter):
        data = ifta_service.get_period_data(logged_quarter, 2, 2025)

        assert not data.apportioned
        assert data.summary.total_miles == Decimal("999.000")
        assert data.summary.average_mpg == 0
        nm = data.jurisdiction_summary[0]
        assert nm.jurisdiction == "NM"
        assert nm.total_miles == Decimal("999.000")
        assert nm.taxable_gallons == 0
        assert nm.tax_owed == 0
        assert validate_ifta_period_data(data)

    def test_empty_quarter(self, ifta_service, logged_quarter):
        data = ifta_service.get_period_data(logged_quarter, 3, 2025)
        assert data.summary.total_miles == 0
        assert data.jurisdiction_summary == ()
        assert data.report is None

    @pytest.mark.parametrize("quarter,year", [(0, 2025), (5, 2025), (1, 1999)])
    def test_invalid_period(self, ifta_service, logged_quarter, quarter, year):
        with pytest.raises(InvalidPeriod):
            ifta_service.get_period_data(logged_quarter, quarter, year)

    def test_tenant_isolation(self, ifta_service, organization_service, logged_quarter):
        other_id = organization_service.create_organization("Other Fleet")
        data = ifta_service.get_period_data(other_id, 1, 2025)
        assert data.summary.total_miles == 0
        assert data.trips == ()

    def test_unknown_jurisdiction_strict(self, ifta_service, logged_quarter, sample_vehicle):
        ifta_service.log_trip(
            logged_quarter, sample_vehicle.id, date(2025, 2, 1), "OK", Decimal("50")
        )
        with pytest.raises(UnknownJurisdiction) as excinfo:
            ifta_service.get_period_data(logged_quarter, 1, 2025)
        assert excinfo.value.jurisdictions == ("OK",)

    def test_unknown_jurisdiction_lenient(self, temp_db, logged_quarter, sample_vehicle):
        service = IftaService(temp_db, mode=RateMode.LENIENT)
        service.log_trip(logged_quarter, sample_vehicle.id, date(2025, 2, 1), "OK", Decimal("50"))
        data = service.get_period_data(logged_quarter, 1, 2025)
        assert data.unknown_jurisdictions == ("OK",)
        ok = next(line for line in data.jurisdiction_summary if line.jurisdiction == "OK")
        assert ok.rate_unknown

    def test_logs_computation(self, ifta_service, logged_quarter, caplog):
        with caplog.at_level(logging.INFO, logger="fleettax.domain.ifta"):
            ifta_service.get_period_data(logged_quarter, 1, 2025)
        records = [r for r in caplog.records if r.getMessage() == "ifta_period_computed"]
        assert len(records) == 1
        assert records[0].organization_id == logged_quarter
        assert records[0].period == "2025-Q1"

    def test_export_period_data(self, ifta_service, logged_quarter):
        exported = ifta_service.export_period_data(logged_quarter, 1, 2025)
        assert exported["period"] == {"quarter": 1, "year": 2025}
        assert exported["summary"]["totalMiles"] == Decimal("1000.000")
        assert {line["jurisdiction"] for line in exported["jurisdictionSummary"]} == {"NM", "TX"}
        assert exported["report"] is None
        assert validate_ifta_period_data(exported)


class TestCaching:
    """Tests for request-scoped memoization."""

    def test_repeated_reads_hit_cache(self, temp_db, logged_quarter):
        cache = RequestCache()
        service = IftaService(temp_db, cache=cache)

        first = service.get_period_data(logged_quarter, 1, 2025)
        second = service.get_period_data(logged_quarter, 1, 2025)

        assert first is second
        assert cache.hits == 1
        assert cache.misses == 1
        assert period_cache_key(logged_quarter, Period(quarter=1, year=2025)) in cache

    def test_write_invalidates(self, temp_db, logged_quarter, sample_vehicle):
        service = IftaService(temp_db, cache=RequestCache())
        before = service.get_period_data(logged_quarter, 1, 2025)
        service.log_trip(logged_quarter, sample_vehicle.id, date(2025, 3, 1), "NM", Decimal("100"))
        after = service.get_period_data(logged_quarter, 1, 2025)

        assert before.summary.total_miles == Decimal("1000.000")
        assert after.summary.total_miles == Decimal("1100.000")

    def test_write_keeps_other_tenants(
        self, temp_db, organization_service, vehicle_service, logged_quarter
    ):
        cache = RequestCache()
        service = IftaService(temp_db, cache=cache)
        other_id = organization_service.create_organization("Other Fleet")
        other_vehicle = vehicle_service.create_vehicle(organization_id=other_id, unit_number="7")

        service.get_period_data(logged_quarter, 1, 2025)
        service.log_trip(other_id, other_vehicle, date(2025, 1, 1), "TX", Decimal("0"))

        assert period_cache_key(logged_quarter, Period(quarter=1, year=2025)) in cache


class TestReports:
    """Tests for persisting and filing reports."""

    def test_generate_report(self, ifta_service, logged_quarter):
        report = ifta_service.generate_report(logged_quarter, 1, 2025)

        assert report.status is ReportStatus.DRAFT
        assert report.due_date == date(2025, 4, 30)
        assert report.net_tax_due == Decimal("-2.40")
        assert report.average_mpg == Decimal("5.00")
        assert [line.jurisdiction for line in report.lines] == ["NM", "TX"]
        tx = report.lines[1]
        assert tx.tax_paid_gallons == Decimal("200.000")
        assert tx.taxable_gallons == Decimal("120.000")

    def test_quarter_without_fuel_cannot_be_filed(self, ifta_service, logged_quarter):
        with pytest.raises(ValidationError) as excinfo:
            ifta_service.generate_report(logged_quarter, 2, 2025)
        assert "average MPG is zero" in str(excinfo.value)
        assert ifta_service.list_reports(logged_quarter) == []

    def test_period_data_references_report(self, ifta_service, logged_quarter):
        ifta_service.get_period_data(logged_quarter, 1, 2025)
        report = ifta_service.generate_report(logged_quarter, 1, 2025)

        data = ifta_service.get_period_data(logged_quarter, 1, 2025)
        assert data.report.id == report.id
        assert data.report.status is ReportStatus.DRAFT

    def test_regenerate_draft(self, ifta_service, logged_quarter, sample_vehicle):
        first = ifta_service.generate_report(logged_quarter, 1, 2025)
        ifta_service.log_fuel_purchase(
            logged_quarter, sample_vehicle.id, date(2025, 3, 1), "NM", Decimal("50"), Decimal("170")
        )
        second = ifta_service.generate_report(logged_quarter, 1, 2025)

        assert second.id == first.id
        assert second.total_gallons == Decimal("250.000")

    def test_submitted_report_cannot_be_regenerated(self, ifta_service, logged_quarter):
        report = ifta_service.generate_report(logged_quarter, 1, 2025)
        ifta_service.set_report_status(logged_quarter, report.id, "submitted")
        with pytest.raises(ConflictError) as excinfo:
            ifta_service.generate_report(logged_quarter, 1, 2025)
        assert "submitted" in str(excinfo.value)

    def test_status_flow(self, ifta_service, logged_quarter):
        report = ifta_service.generate_report(logged_quarter, 1, 2025)
        assert report.submitted_at is None

        submitted = ifta_service.set_report_status(logged_quarter, report.id, ReportStatus.SUBMITTED)
        assert submitted.status is ReportStatus.SUBMITTED
        assert submitted.submitted_at is not None

        rejected = ifta_service.set_report_status(logged_quarter, report.id, "REJECTED")
        assert rejected.status is ReportStatus.REJECTED
        assert rejected.submitted_at == submitted.submitted_at

        draft = ifta_service.set_report_status(logged_quarter, report.id, "draft")
        assert draft.status is ReportStatus.DRAFT
        assert draft.submitted_at is None

    @pytest.mark.parametrize("target", ["accepted", "rejected", "draft"])
    def test_disallowed_transition(self, ifta_service, logged_quarter, target):
        report = ifta_service.generate_report(logged_quarter, 1, 2025)
        with pytest.raises(ValidationError) as excinfo:
            ifta_service.set_report_status(logged_quarter, report.id, target)
        assert "Cannot change report status from draft" in str(excinfo.value)

    def test_accepted_is_final(self, ifta_service, logged_quarter):
        report = ifta_service.generate_report(logged_quarter, 1, 2025)
        ifta_service.set_report_status(logged_quarter, report.id, "submitted")
        ifta_service.set_report_status(logged_quarter, report.id, "accepted")
        with pytest.raises(ValidationError):
            ifta_service.set_report_status(logged_quarter, report.id, "draft")

    def test_unknown_status(self, ifta_service, logged_quarter):
        report = ifta_service.generate_report(logged_quarter, 1, 2025)
        with pytest.raises(ValidationError) as excinfo:
            ifta_service.set_report_status(logged_quarter, report.id, "filed")
        assert "Unknown report status" in str(excinfo.value)

    def test_report_is_tenant_scoped(self, ifta_service, organization_service, logged_quarter):
        report = ifta_service.generate_report(logged_quarter, 1, 2025)
        other_id = organization_service.create_organization("Other Fleet")
        with pytest.raises(NotFoundError):
            ifta_service.get_report(other_id, report.id)
        with pytest.raises(NotFoundError):
            ifta_service.set_report_status(other_id, report.id, "submitted")

    def test_list_reports(self, ifta_service, logged_quarter):
        ifta_service.generate_report(logged_quarter, 1, 2025)
        ifta_service.generate_report(logged_quarter, 3, 2025)
        reports = ifta_service.list_reports(logged_quarter)
        assert [(r.year, r.quarter) for r in reports] == [(2025, 3), (2025, 1)]
        assert ifta_service.list_reports(logged_quarter, year=2024) == []
