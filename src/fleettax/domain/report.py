"""IFTA report assembly and structural validation."""

from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any, Iterable, Optional

from fleettax.domain.entities import (
    FuelPurchase,
    IftaPeriodData,
    IftaPeriodSummary,
    Period,
    ReportInfo,
    ReportStatus,
    TaxComputation,
    Trip,
    is_valid_period,
)

SUMMARY_FIELDS = ("totalMiles", "totalGallons", "averageMpg", "totalFuelCost")
SEQUENCE_FIELDS = ("trips", "fuelPurchases", "jurisdictionSummary")
_REPORT_STATUSES = {status.value for status in ReportStatus}


def assemble_period_data(
    period: Period,
    summary: IftaPeriodSummary,
    trips: Iterable[Trip],
    fuel_purchases: Iterable[FuelPurchase],
    computation: TaxComputation,
    report: Optional[ReportInfo] = None,
) -> IftaPeriodData:
    """Combine aggregator and tax computer output into the period aggregate."""
    return IftaPeriodData(
        period=period,
        summary=summary,
        trips=tuple(trips),
        fuel_purchases=tuple(fuel_purchases),
        jurisdiction_summary=computation.jurisdictions,
        report=report,
        unknown_jurisdictions=computation.unknown_jurisdictions,
        apportioned=computation.apportioned,
    )


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, Decimal):
        return value.is_finite()
    if isinstance(value, int):
        return True
    if isinstance(value, float):
        return value == value and value not in (float("inf"), float("-inf"))
    return False


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _valid_period(period: Any) -> bool:
    if not isinstance(period, Mapping):
        return False
    return is_valid_period(period.get("quarter"), period.get("year"))


def _valid_summary(summary: Any) -> bool:
    if not isinstance(summary, Mapping):
        return False
    for name in SUMMARY_FIELDS:
        value = summary.get(name)
        if not _is_number(value) or value < 0:
            return False
    return True


def _valid_report(report: Any) -> bool:
    if report is None:
        return True
    if not isinstance(report, Mapping):
        return False
    if report.get("id") is None:
        return False
    status = report.get("status")
    return isinstance(status, str) and status.lower() in _REPORT_STATUSES


def validate_ifta_period_data(data: IftaPeriodData | Mapping[str, Any]) -> bool:
    """Return True if period data is structurally usable downstream.

    Accepts the dataclass or its serialized mapping (``to_dict()`` shape).
    Checks structure and ranges only; no totals are recomputed. A report of
    None means one has not been generated yet and is valid.
    """
    if isinstance(data, IftaPeriodData):
        data = data.to_dict()
    if not isinstance(data, Mapping):
        return False

    if not _valid_period(data.get("period")):
        return False
    if not _valid_summary(data.get("summary")):
        return False
    for name in SEQUENCE_FIELDS:
        if not _is_sequence(data.get(name)):
            return False
    if "report" not in data:
        return False
    return _valid_report(data["report"])
