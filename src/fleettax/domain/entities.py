"""Domain model entities for fleettax.

These are pure data classes representing business concepts, independent of
database schema. The IFTA engine only ever reads these; storage rows are
converted by the database mappers before they reach the domain layer.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from dateutil.relativedelta import relativedelta

from fleettax.domain.errors import InvalidPeriod

MIN_YEAR = 2000
MAX_YEAR = 2100


class RateMode(str, Enum):
    """How the tax computer treats jurisdictions missing from the rate table."""

    STRICT = "strict"
    LENIENT = "lenient"


class ReportStatus(str, Enum):
    """Filing status of a persisted IFTA report."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class PeriodState(str, Enum):
    """Lifecycle state of a period's report computation."""

    EMPTY = "empty"
    AGGREGATED = "aggregated"
    COMPUTED = "computed"
    VALIDATED = "validated"
    EXPORTED = "exported"
    PERSISTED = "persisted"


@dataclass(frozen=True)
class Organization:
    """Tenant organization domain entity."""

    id: int
    name: str
    created_at: datetime


@dataclass(frozen=True)
class Vehicle:
    """Fleet vehicle domain entity."""

    id: int
    organization_id: int
    unit_number: str
    make: Optional[str]
    model: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Period:
    """A calendar quarter.

    Raises InvalidPeriod on construction when the quarter is not 1-4 or the
    year is outside MIN_YEAR..MAX_YEAR.
    """

    quarter: int
    year: int

    def __post_init__(self) -> None:
        if not is_valid_period(self.quarter, self.year):
            raise InvalidPeriod(self.quarter, self.year)

    @property
    def start_date(self) -> date:
        return date(self.year, (self.quarter - 1) * 3 + 1, 1)

    @property
    def end_date(self) -> date:
        return self.start_date + relativedelta(months=3, days=-1)

    @property
    def due_date(self) -> date:
        """Filing deadline: last day of the month after the quarter ends."""
        return self.end_date + relativedelta(months=1, day=31)

    @property
    def label(self) -> str:
        return f"{self.year}-Q{self.quarter}"

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def to_dict(self) -> dict[str, int]:
        return {"quarter": self.quarter, "year": self.year}


def is_valid_period(quarter: Any, year: Any) -> bool:
    """Return True if quarter/year are integers within the accepted domain."""
    if isinstance(quarter, bool) or isinstance(year, bool):
        return False
    if not isinstance(quarter, int) or not isinstance(year, int):
        return False
    return quarter in (1, 2, 3, 4) and MIN_YEAR <= year <= MAX_YEAR


@dataclass(frozen=True)
class Trip:
    """Miles driven in one jurisdiction."""

    jurisdiction: str
    miles: Decimal
    id: Optional[int] = None
    date: Optional[date] = None
    vehicle_id: Optional[int] = None
    fuel_used: Optional[Decimal] = None
    notes: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "vehicleId": self.vehicle_id,
            "jurisdiction": self.jurisdiction,
            "distance": self.miles,
            "fuelUsed": self.fuel_used,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class FuelPurchase:
    """Fuel bought in one jurisdiction."""

    jurisdiction: str
    gallons: Decimal
    cost: Decimal
    id: Optional[int] = None
    date: Optional[date] = None
    vehicle_id: Optional[int] = None
    vendor: Optional[str] = None
    receipt_number: Optional[str] = None
    notes: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "vehicleId": self.vehicle_id,
            "jurisdiction": self.jurisdiction,
            "gallons": self.gallons,
            "amount": self.cost,
            "vendor": self.vendor,
            "receiptNumber": self.receipt_number,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class JurisdictionTotals:
    """Per-jurisdiction sums produced by the aggregator."""

    jurisdiction: str
    total_miles: Decimal
    total_gallons: Decimal
    fuel_cost: Decimal


@dataclass(frozen=True)
class IftaPeriodSummary:
    """Fleet-wide rollup for a period."""

    total_miles: Decimal
    total_gallons: Decimal
    average_mpg: Decimal
    total_fuel_cost: Decimal

    def to_dict(self) -> dict[str, Decimal]:
        return {
            "totalMiles": self.total_miles,
            "totalGallons": self.total_gallons,
            "averageMpg": self.average_mpg,
            "totalFuelCost": self.total_fuel_cost,
        }


@dataclass(frozen=True)
class Aggregation:
    """Aggregator output: per-jurisdiction totals sorted by code, plus fleet rollup."""

    jurisdictions: tuple[JurisdictionTotals, ...]
    summary: IftaPeriodSummary

    def totals_for(self, jurisdiction: str) -> Optional[JurisdictionTotals]:
        for totals in self.jurisdictions:
            if totals.jurisdiction == jurisdiction:
                return totals
        return None


@dataclass(frozen=True)
class JurisdictionSummary:
    """Tax position of the fleet in one jurisdiction.

    tax_owed is signed: negative values are credits.
    """

    jurisdiction: str
    total_miles: Decimal
    total_gallons: Decimal
    fuel_cost: Decimal
    tax_rate: Decimal
    taxable_gallons: Decimal
    tax_liability: Decimal
    tax_paid: Decimal
    tax_owed: Decimal
    net_fuel_cost: Decimal
    rate_unknown: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "jurisdiction": self.jurisdiction,
            "totalMiles": self.total_miles,
            "totalGallons": self.total_gallons,
            "fuelCost": self.fuel_cost,
            "taxRate": self.tax_rate,
            "taxableGallons": self.taxable_gallons,
            "taxLiability": self.tax_liability,
            "taxPaid": self.tax_paid,
            "taxOwed": self.tax_owed,
            "netFuelCost": self.net_fuel_cost,
            "rateUnknown": self.rate_unknown,
        }


@dataclass(frozen=True)
class TaxComputation:
    """Tax computer output for one period."""

    period: Period
    average_mpg: Decimal
    jurisdictions: tuple[JurisdictionSummary, ...]
    total_taxable_gallons: Decimal
    total_liability: Decimal
    total_tax_paid: Decimal
    net_tax_owed: Decimal
    weighted_average_rate: Decimal
    unknown_jurisdictions: tuple[str, ...] = ()
    apportioned: bool = True

    @property
    def has_unknown_jurisdictions(self) -> bool:
        return bool(self.unknown_jurisdictions)


@dataclass(frozen=True)
class ReportInfo:
    """Reference to a persisted report for a period."""

    id: int
    status: ReportStatus
    submitted_at: Optional[datetime]
    due_date: Optional[date]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "status": self.status.value,
            "submittedAt": self.submitted_at,
            "dueDate": self.due_date,
        }


@dataclass(frozen=True)
class IftaReportLine:
    """Persisted per-jurisdiction line of an IFTA report."""

    jurisdiction: str
    total_miles: Decimal
    taxable_gallons: Decimal
    tax_paid_gallons: Decimal
    tax_rate: Decimal
    tax_owed: Decimal


@dataclass(frozen=True)
class IftaReport:
    """Persisted IFTA report domain entity."""

    id: int
    organization_id: int
    quarter: int
    year: int
    status: ReportStatus
    due_date: date
    submitted_at: Optional[datetime]
    total_miles: Decimal
    total_gallons: Decimal
    average_mpg: Decimal
    net_tax_due: Decimal
    created_at: datetime
    lines: tuple[IftaReportLine, ...] = ()

    @property
    def period(self) -> Period:
        return Period(quarter=self.quarter, year=self.year)

    def to_info(self) -> ReportInfo:
        return ReportInfo(
            id=self.id,
            status=self.status,
            submitted_at=self.submitted_at,
            due_date=self.due_date,
        )


@dataclass(frozen=True)
class IftaPeriodData:
    """Aggregate root for one organization's quarter."""

    period: Period
    summary: IftaPeriodSummary
    trips: tuple[Trip, ...] = ()
    fuel_purchases: tuple[FuelPurchase, ...] = ()
    jurisdiction_summary: tuple[JurisdictionSummary, ...] = ()
    report: Optional[ReportInfo] = None
    unknown_jurisdictions: tuple[str, ...] = field(default=())
    # False when miles were driven without any fuel purchase; tax lines are zero
    apportioned: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the shape consumed by export and display collaborators."""
        return {
            "period": self.period.to_dict(),
            "summary": self.summary.to_dict(),
            "trips": [trip.to_dict() for trip in self.trips],
            "fuelPurchases": [purchase.to_dict() for purchase in self.fuel_purchases],
            "jurisdictionSummary": [line.to_dict() for line in self.jurisdiction_summary],
            "report": self.report.to_dict() if self.report is not None else None,
        }
