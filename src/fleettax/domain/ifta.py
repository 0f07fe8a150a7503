"""IFTA domain service.

Binds the engine (aggregator, tax computer, report validation) to the
database: logging trips and fuel purchases, building a quarter's period
data and persisting reports. Every operation takes the organization ID
explicitly.
"""

import logging
from datetime import date, datetime, UTC
from decimal import Decimal
from typing import Any, Optional

from fleettax.database.base import Database
from fleettax.domain.aggregator import normalize_fuel_purchase, normalize_trip
from fleettax.domain.entities import (
    FuelPurchase,
    IftaPeriodData,
    IftaReport,
    IftaReportLine,
    Period,
    RateMode,
    ReportStatus,
    Trip,
)
from fleettax.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    cannot_apportion,
    fuel_purchase_not_found,
    invalid_status_transition,
    organization_not_found,
    report_not_editable,
    report_not_found,
    trip_not_found,
    vehicle_not_found,
)
from fleettax.domain.rates import RateTable, default_rate_table, normalize_jurisdiction
from fleettax.domain.tax import TaxComputer
from fleettax.domain.workflow import IftaPeriodWorkflow
from fleettax.utils.request_cache import RequestCache

logger = logging.getLogger(__name__)

STATUS_TRANSITIONS: dict[ReportStatus, frozenset[ReportStatus]] = {
    ReportStatus.DRAFT: frozenset({ReportStatus.SUBMITTED}),
    ReportStatus.SUBMITTED: frozenset({ReportStatus.ACCEPTED, ReportStatus.REJECTED}),
    ReportStatus.REJECTED: frozenset({ReportStatus.DRAFT}),
    ReportStatus.ACCEPTED: frozenset(),
}


def period_cache_key(organization_id: int, period: Period) -> str:
    return f"ifta:{organization_id}:{period.year}:Q{period.quarter}"


class IftaService:
    """Service for IFTA trip logging and quarterly reporting."""

    def __init__(
        self,
        db: Database,
        rate_table: Optional[RateTable] = None,
        mode: RateMode = RateMode.STRICT,
        cache: Optional[RequestCache] = None,
    ):
        """Initialize IFTA service.

        Args:
            db: Database instance
            rate_table: Jurisdiction rates (defaults to the built-in table)
            mode: Unknown-jurisdiction handling for tax computation
            cache: Request-scoped cache; a private one is created if omitted
        """
        self.db = db
        self.rate_table = rate_table if rate_table is not None else default_rate_table()
        self.mode = RateMode(mode)
        self.cache = cache if cache is not None else RequestCache()
        self.tax_computer = TaxComputer(self.rate_table, self.mode)

    def _require_organization(self, organization_id: int) -> None:
        if self.db.get_organization(organization_id) is None:
            raise NotFoundError(organization_not_found(organization_id))

    def _require_vehicle(self, organization_id: int, vehicle_id: int) -> None:
        if self.db.get_vehicle(organization_id, vehicle_id) is None:
            raise NotFoundError(vehicle_not_found(vehicle_id, organization_id))

    def _invalidate(self, organization_id: int) -> None:
        self.cache.invalidate(f"ifta:{organization_id}:")

    # Trip and fuel records
    def log_trip(
        self,
        organization_id: int,
        vehicle_id: int,
        date: date,
        jurisdiction: str,
        miles: Decimal,
        fuel_used: Optional[Decimal] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Record miles driven by a vehicle in a jurisdiction.

        Args:
            organization_id: Owning organization
            vehicle_id: Vehicle that drove the miles
            date: Trip date
            jurisdiction: Jurisdiction code (normalized to upper case)
            miles: Distance driven, non-negative
            fuel_used: Optional fuel burned, non-negative
            notes: Optional notes

        Returns:
            Trip ID

        Raises:
            NotFoundError: If organization or vehicle doesn't exist
            MalformedRecord: If miles or fuel_used are negative or jurisdiction is blank
        """
        self._require_organization(organization_id)
        self._require_vehicle(organization_id, vehicle_id)
        trip = normalize_trip(
            Trip(jurisdiction=jurisdiction, miles=miles, fuel_used=fuel_used)
        )

        trip_id = self.db.create_trip(
            organization_id=organization_id,
            vehicle_id=vehicle_id,
            date=date,
            jurisdiction=trip.jurisdiction,
            miles=trip.miles,
            fuel_used=trip.fuel_used,
            notes=notes,
        )
        self._invalidate(organization_id)
        return trip_id

    def log_fuel_purchase(
        self,
        organization_id: int,
        vehicle_id: int,
        date: date,
        jurisdiction: str,
        gallons: Decimal,
        cost: Decimal,
        vendor: Optional[str] = None,
        receipt_number: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Record a fuel purchase.

        Returns:
            Fuel purchase ID

        Raises:
            NotFoundError: If organization or vehicle doesn't exist
            MalformedRecord: If gallons or cost are negative or jurisdiction is blank
        """
        self._require_organization(organization_id)
        self._require_vehicle(organization_id, vehicle_id)
        purchase = normalize_fuel_purchase(
            FuelPurchase(jurisdiction=jurisdiction, gallons=gallons, cost=cost)
        )

        purchase_id = self.db.create_fuel_purchase(
            organization_id=organization_id,
            vehicle_id=vehicle_id,
            date=date,
            jurisdiction=purchase.jurisdiction,
            gallons=purchase.gallons,
            cost=purchase.cost,
            vendor=vendor,
            receipt_number=receipt_number,
            notes=notes,
        )
        self._invalidate(organization_id)
        return purchase_id

    def list_trips(
        self,
        organization_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        vehicle_id: Optional[int] = None,
        jurisdiction: Optional[str] = None,
    ) -> list[Trip]:
        """List trips with optional filters, newest first."""
        self._require_organization(organization_id)
        return self.db.list_trips(
            organization_id=organization_id,
            start_date=start_date,
            end_date=end_date,
            vehicle_id=vehicle_id,
            jurisdiction=normalize_jurisdiction(jurisdiction) if jurisdiction else None,
        )

    def list_fuel_purchases(
        self,
        organization_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        vehicle_id: Optional[int] = None,
        jurisdiction: Optional[str] = None,
    ) -> list[FuelPurchase]:
        """List fuel purchases with optional filters, newest first."""
        self._require_organization(organization_id)
        return self.db.list_fuel_purchases(
            organization_id=organization_id,
            start_date=start_date,
            end_date=end_date,
            vehicle_id=vehicle_id,
            jurisdiction=normalize_jurisdiction(jurisdiction) if jurisdiction else None,
        )

    def delete_trip(self, organization_id: int, trip_id: int) -> None:
        """Delete a trip.

        Raises:
            NotFoundError: If the trip is not part of the organization
        """
        if not self.db.delete_trip(organization_id, trip_id):
            raise NotFoundError(trip_not_found(trip_id))
        self._invalidate(organization_id)

    def delete_fuel_purchase(self, organization_id: int, purchase_id: int) -> None:
        """Delete a fuel purchase.

        Raises:
            NotFoundError: If the purchase is not part of the organization
        """
        if not self.db.delete_fuel_purchase(organization_id, purchase_id):
            raise NotFoundError(fuel_purchase_not_found(purchase_id))
        self._invalidate(organization_id)

    # Period computation
    def _run_workflow(self, organization_id: int, period: Period) -> IftaPeriodWorkflow:
        trips = self.db.list_trips(
            organization_id, start_date=period.start_date, end_date=period.end_date
        )
        purchases = self.db.list_fuel_purchases(
            organization_id, start_date=period.start_date, end_date=period.end_date
        )
        existing = self.db.get_ifta_report(organization_id, period.quarter, period.year)

        workflow = IftaPeriodWorkflow(period, self.tax_computer)
        workflow.run(trips, purchases, existing.to_info() if existing else None)

        logger.info(
            "ifta_period_computed",
            extra={
                "organization_id": organization_id,
                "period": period.label,
                "trip_count": len(trips),
                "fuel_purchase_count": len(purchases),
                "unknown_jurisdictions": list(workflow.computation.unknown_jurisdictions),
            },
        )
        return workflow

    def get_period_data(self, organization_id: int, quarter: int, year: int) -> IftaPeriodData:
        """Build validated IFTA data for an organization's quarter.

        Memoized in the request cache until a write for the organization.

        Raises:
            InvalidPeriod: If quarter/year are out of range
            NotFoundError: If organization doesn't exist
            UnknownJurisdiction: Strict mode and a jurisdiction has no rate
            MalformedRecord: If a stored record is invalid
        """
        period = Period(quarter=quarter, year=year)
        self._require_organization(organization_id)
        return self.cache.get_or_compute(
            period_cache_key(organization_id, period),
            lambda: self._run_workflow(organization_id, period).data,
        )

    def export_period_data(self, organization_id: int, quarter: int, year: int) -> dict[str, Any]:
        """Compute a quarter and hand it off in its serialized form."""
        period = Period(quarter=quarter, year=year)
        self._require_organization(organization_id)
        workflow = self._run_workflow(organization_id, period)
        return workflow.mark_exported().to_dict()

    # Reports
    def generate_report(self, organization_id: int, quarter: int, year: int) -> IftaReport:
        """Compute a quarter and persist it as a draft report.

        Regenerating replaces an existing draft (or rejected report reset to
        draft).

        Raises:
            ConflictError: If the quarter's report is already submitted or accepted
            ValidationError: If miles were driven but no fuel was purchased, so
                no fleet MPG exists to apportion taxable gallons
        """
        period = Period(quarter=quarter, year=year)
        self._require_organization(organization_id)

        existing = self.db.get_ifta_report(organization_id, quarter, year)
        if existing is not None and existing.status is not ReportStatus.DRAFT:
            raise ConflictError(report_not_editable(period.label, existing.status.value))

        workflow = self._run_workflow(organization_id, period)
        computation = workflow.computation
        if not computation.apportioned:
            raise ValidationError(cannot_apportion(workflow.aggregation.summary.total_miles))
        summary = workflow.aggregation.summary
        lines = [
            IftaReportLine(
                jurisdiction=line.jurisdiction,
                total_miles=line.total_miles,
                taxable_gallons=line.taxable_gallons,
                tax_paid_gallons=line.total_gallons,
                tax_rate=line.tax_rate,
                tax_owed=line.tax_owed,
            )
            for line in computation.jurisdictions
        ]
        report_id = self.db.save_ifta_report(
            organization_id=organization_id,
            quarter=quarter,
            year=year,
            due_date=period.due_date,
            total_miles=summary.total_miles,
            total_gallons=summary.total_gallons,
            average_mpg=summary.average_mpg,
            net_tax_due=computation.net_tax_owed,
            lines=lines,
        )
        workflow.mark_persisted()
        self._invalidate(organization_id)

        logger.info(
            "ifta_report_generated",
            extra={
                "organization_id": organization_id,
                "period": period.label,
                "report_id": report_id,
                "net_tax_due": str(computation.net_tax_owed),
            },
        )
        return self.db.get_ifta_report_by_id(organization_id, report_id)

    def get_report(self, organization_id: int, report_id: int) -> IftaReport:
        """Get a report within an organization.

        Raises:
            NotFoundError: If report not found
        """
        report = self.db.get_ifta_report_by_id(organization_id, report_id)
        if report is None:
            raise NotFoundError(report_not_found(report_id))
        return report

    def set_report_status(
        self, organization_id: int, report_id: int, status: ReportStatus | str
    ) -> IftaReport:
        """Move a report through its filing states.

        draft -> submitted -> accepted | rejected, and rejected -> draft.
        Submitting stamps submitted_at; returning to draft clears it.

        Raises:
            NotFoundError: If report not found
            ValidationError: If the status is unknown or the transition is not allowed
        """
        if isinstance(status, ReportStatus):
            target = status
        else:
            try:
                target = ReportStatus(status.strip().lower())
            except ValueError:
                raise ValidationError(f"Unknown report status '{status}'") from None

        report = self.get_report(organization_id, report_id)
        if target not in STATUS_TRANSITIONS[report.status]:
            raise ValidationError(invalid_status_transition(report.status.value, target.value))

        submitted_at = datetime.now(UTC) if target is ReportStatus.SUBMITTED else None
        self.db.update_ifta_report_status(
            organization_id, report_id, target.value, submitted_at=submitted_at
        )
        self._invalidate(organization_id)
        logger.info(
            "ifta_report_status_changed",
            extra={
                "organization_id": organization_id,
                "report_id": report_id,
                "from_status": report.status.value,
                "to_status": target.value,
            },
        )
        return self.get_report(organization_id, report_id)

    def list_reports(self, organization_id: int, year: Optional[int] = None) -> list[IftaReport]:
        """List an organization's reports, newest period first."""
        self._require_organization(organization_id)
        return self.db.list_ifta_reports(organization_id, year=year)
