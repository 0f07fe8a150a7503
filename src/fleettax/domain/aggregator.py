"""Record normalization and per-jurisdiction aggregation.

Both steps are pure functions of their inputs. A single bad record rejects
the whole batch: negative miles, gallons or cost usually point at an
upstream data-quality problem that clamping would hide.
"""

import logging
from collections import defaultdict
from dataclasses import replace
from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence

from fleettax.domain.entities import (
    Aggregation,
    FuelPurchase,
    IftaPeriodSummary,
    JurisdictionTotals,
    Trip,
)
from fleettax.domain.errors import MalformedRecord
from fleettax.domain.numbers import GALLONS, MILES, MONEY, MPG, ZERO, quantize, to_decimal
from fleettax.domain.rates import normalize_jurisdiction

logger = logging.getLogger(__name__)


def _non_negative(kind: str, field: str, value: Any, index: Optional[int]) -> Decimal:
    amount = to_decimal(value)
    if amount is None or amount < 0:
        raise MalformedRecord(kind, field, value, index)
    return amount


def _jurisdiction(kind: str, value: Any, index: Optional[int]) -> str:
    if not isinstance(value, str) or not value.strip():
        raise MalformedRecord(kind, "jurisdiction", value, index, reason="must be a non-empty code")
    return normalize_jurisdiction(value)


def normalize_trip(trip: Trip, index: Optional[int] = None) -> Trip:
    """Validate one trip and canonicalize its jurisdiction and mileage.

    Raises:
        MalformedRecord: If miles are negative or the jurisdiction is blank
    """
    fuel_used = trip.fuel_used
    if fuel_used is not None:
        fuel_used = quantize(_non_negative("trip", "fuel_used", fuel_used, index), GALLONS)
    return replace(
        trip,
        jurisdiction=_jurisdiction("trip", trip.jurisdiction, index),
        miles=quantize(_non_negative("trip", "miles", trip.miles, index), MILES),
        fuel_used=fuel_used,
    )


def normalize_fuel_purchase(purchase: FuelPurchase, index: Optional[int] = None) -> FuelPurchase:
    """Validate one fuel purchase and canonicalize its code, gallons and cost.

    Raises:
        MalformedRecord: If gallons or cost are negative or the jurisdiction is blank
    """
    kind = "fuel purchase"
    return replace(
        purchase,
        jurisdiction=_jurisdiction(kind, purchase.jurisdiction, index),
        gallons=quantize(_non_negative(kind, "gallons", purchase.gallons, index), GALLONS),
        cost=quantize(_non_negative(kind, "cost", purchase.cost, index), MONEY),
    )


def normalize_trips(trips: Iterable[Trip]) -> tuple[Trip, ...]:
    """Normalize a batch of trips; the first bad record rejects the batch."""
    return tuple(normalize_trip(trip, index) for index, trip in enumerate(trips))


def normalize_fuel_purchases(purchases: Iterable[FuelPurchase]) -> tuple[FuelPurchase, ...]:
    """Normalize a batch of fuel purchases; the first bad record rejects the batch."""
    return tuple(
        normalize_fuel_purchase(purchase, index) for index, purchase in enumerate(purchases)
    )


def miles_by_jurisdiction(trips: Sequence[Trip]) -> dict[str, Decimal]:
    """Sum normalized trip miles per jurisdiction."""
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for trip in trips:
        totals[trip.jurisdiction] += trip.miles
    return dict(totals)


def gallons_by_jurisdiction(purchases: Sequence[FuelPurchase]) -> dict[str, Decimal]:
    """Sum normalized purchased gallons per jurisdiction."""
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for purchase in purchases:
        totals[purchase.jurisdiction] += purchase.gallons
    return dict(totals)


def average_mpg(total_miles: Decimal, total_gallons: Decimal) -> Decimal:
    """Fleet fuel economy, or zero when nothing was purchased."""
    if total_gallons <= 0:
        return quantize(ZERO, MPG)
    return quantize(total_miles / total_gallons, MPG)


def aggregate(
    trips: Iterable[Trip], fuel_purchases: Iterable[FuelPurchase]
) -> Aggregation:
    """Reduce trips and fuel purchases into per-jurisdiction and fleet totals.

    Jurisdictions from either collection are included; output is sorted by
    code so repeated calls on the same input compare equal. Empty input
    yields an all-zero summary with average_mpg of 0.

    Raises:
        MalformedRecord: If any record fails normalization
    """
    normalized_trips = normalize_trips(trips)
    normalized_purchases = normalize_fuel_purchases(fuel_purchases)

    miles = miles_by_jurisdiction(normalized_trips)
    gallons = gallons_by_jurisdiction(normalized_purchases)
    costs: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for purchase in normalized_purchases:
        costs[purchase.jurisdiction] += purchase.cost

    jurisdictions = tuple(
        JurisdictionTotals(
            jurisdiction=code,
            total_miles=miles.get(code, quantize(ZERO, MILES)),
            total_gallons=gallons.get(code, quantize(ZERO, GALLONS)),
            fuel_cost=costs.get(code, quantize(ZERO, MONEY)),
        )
        for code in sorted(set(miles) | set(gallons))
    )

    total_miles = quantize(sum((j.total_miles for j in jurisdictions), ZERO), MILES)
    total_gallons = quantize(sum((j.total_gallons for j in jurisdictions), ZERO), GALLONS)
    total_fuel_cost = quantize(sum((j.fuel_cost for j in jurisdictions), ZERO), MONEY)

    summary = IftaPeriodSummary(
        total_miles=total_miles,
        total_gallons=total_gallons,
        average_mpg=average_mpg(total_miles, total_gallons),
        total_fuel_cost=total_fuel_cost,
    )

    logger.debug(
        "ifta_aggregation_completed",
        extra={
            "trip_count": len(normalized_trips),
            "fuel_purchase_count": len(normalized_purchases),
            "jurisdiction_count": len(jurisdictions),
            "total_miles": str(total_miles),
            "total_gallons": str(total_gallons),
        },
    )
    return Aggregation(jurisdictions=jurisdictions, summary=summary)
