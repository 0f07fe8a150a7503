"""IFTA tax computation.

Fuel consumption is apportioned to each jurisdiction with the fleet-wide
average MPG, kept at full precision (the rounded MPG is for display only):

    taxable_gallons = jurisdiction_miles * fleet_gallons / fleet_miles
    tax_liability   = taxable_gallons * rate
    tax_paid        = purchased_gallons * rate
    tax_owed        = tax_liability - tax_paid     (negative = credit)

A period with miles but no purchased fuel has no fleet MPG. Its lines are
still produced, with zero tax figures, and the computation is marked as
not apportioned.

Usage:
    from fleettax.domain.aggregator import aggregate
    from fleettax.domain.rates import default_rate_table
    from fleettax.domain.tax import TaxComputer

    aggregation = aggregate(trips, fuel_purchases)
    computation = TaxComputer(default_rate_table()).compute(aggregation, period)
    print(computation.net_tax_owed)
"""

import logging
from decimal import Decimal
from typing import Iterable, Optional

from fleettax.domain.entities import (
    Aggregation,
    JurisdictionSummary,
    Period,
    RateMode,
    TaxComputation,
)
from fleettax.domain.errors import UnknownJurisdiction
from fleettax.domain.numbers import GALLONS, MONEY, ZERO, quantize
from fleettax.domain.rates import RateTable

logger = logging.getLogger(__name__)

# Largest error one cent rounding can introduce into a line's liability
LINE_ROUNDING_TOLERANCE = Decimal("0.005")


class TaxComputer:
    """Computes per-jurisdiction tax owed for an aggregated period."""

    def __init__(self, rate_table: RateTable, mode: RateMode = RateMode.STRICT):
        """Initialize tax computer.

        Args:
            rate_table: Jurisdiction rate lookup
            mode: STRICT rejects unknown jurisdictions, LENIENT taxes them at zero
        """
        self.rate_table = rate_table
        self.mode = RateMode(mode)

    def resolve_rates(
        self, jurisdictions: list[str], period: Period
    ) -> tuple[dict[str, Decimal], tuple[str, ...]]:
        """Look up rates for every jurisdiction.

        Returns:
            Tuple of (rates by code, codes substituted with a zero rate)

        Raises:
            UnknownJurisdiction: In strict mode, listing every missing code
        """
        rates: dict[str, Decimal] = {}
        unknown: list[str] = []
        for code in jurisdictions:
            entry = self.rate_table.find_entry(code, period)
            if entry is None:
                unknown.append(code)
                rates[code] = ZERO
            else:
                rates[code] = entry.rate

        if unknown and self.mode is RateMode.STRICT:
            logger.error(
                "ifta_unknown_jurisdiction",
                extra={"jurisdictions": unknown, "period": period.label},
            )
            raise UnknownJurisdiction(unknown)
        if unknown:
            logger.warning(
                "ifta_unknown_jurisdiction_zero_rate",
                extra={"jurisdictions": unknown, "period": period.label},
            )
        return rates, tuple(unknown)

    def compute(self, aggregation: Aggregation, period: Period) -> TaxComputation:
        """Compute tax owed per jurisdiction.

        Args:
            aggregation: Output of the aggregator for the period
            period: Reporting period, used to select effective rates

        Returns:
            TaxComputation with jurisdictions in aggregation order. When miles
            were driven but no fuel was purchased, ``apportioned`` is False
            and every line carries zero tax figures.

        Raises:
            UnknownJurisdiction: Strict mode and a jurisdiction has no rate
        """
        summary = aggregation.summary
        apportioned = not (summary.total_miles > 0 and summary.total_gallons <= 0)

        codes = [totals.jurisdiction for totals in aggregation.jurisdictions]
        rates, unknown = self.resolve_rates(codes, period)

        lines = []
        for totals in aggregation.jurisdictions:
            rate = rates[totals.jurisdiction]
            if apportioned:
                taxable_gallons = self.taxable_gallons(
                    totals.total_miles, summary.total_miles, summary.total_gallons
                )
                liability = quantize(taxable_gallons * rate, MONEY)
                paid = quantize(totals.total_gallons * rate, MONEY)
            else:
                taxable_gallons = quantize(ZERO, GALLONS)
                liability = paid = quantize(ZERO, MONEY)
            owed = liability - paid
            lines.append(
                JurisdictionSummary(
                    jurisdiction=totals.jurisdiction,
                    total_miles=totals.total_miles,
                    total_gallons=totals.total_gallons,
                    fuel_cost=totals.fuel_cost,
                    tax_rate=rate,
                    taxable_gallons=taxable_gallons,
                    tax_liability=liability,
                    tax_paid=paid,
                    tax_owed=owed,
                    net_fuel_cost=totals.fuel_cost + owed,
                    rate_unknown=totals.jurisdiction in unknown,
                )
            )

        total_taxable = quantize(sum((line.taxable_gallons for line in lines), ZERO), GALLONS)
        total_liability = quantize(sum((line.tax_liability for line in lines), ZERO), MONEY)
        total_paid = quantize(sum((line.tax_paid for line in lines), ZERO), MONEY)

        computation = TaxComputation(
            period=period,
            average_mpg=summary.average_mpg,
            jurisdictions=tuple(lines),
            total_taxable_gallons=total_taxable,
            total_liability=total_liability,
            total_tax_paid=total_paid,
            net_tax_owed=total_liability - total_paid,
            weighted_average_rate=weighted_average_rate(lines),
            unknown_jurisdictions=unknown,
            apportioned=apportioned,
        )

        if not apportioned:
            logger.warning(
                "ifta_period_not_apportioned",
                extra={"period": period.label, "total_miles": str(summary.total_miles)},
            )
        logger.debug(
            "ifta_tax_computed",
            extra={
                "period": period.label,
                "mode": self.mode.value,
                "jurisdiction_count": len(lines),
                "net_tax_owed": str(computation.net_tax_owed),
            },
        )
        return computation

    @staticmethod
    def taxable_gallons(
        miles: Decimal, fleet_miles: Decimal, fleet_gallons: Decimal
    ) -> Decimal:
        """Gallons apportioned to a jurisdiction from its share of fleet miles."""
        if fleet_miles <= 0 or fleet_gallons <= 0:
            return quantize(ZERO, GALLONS)
        return quantize(miles * fleet_gallons / fleet_miles, GALLONS)


def weighted_average_rate(lines: Iterable[JurisdictionSummary]) -> Decimal:
    """Taxable-gallon weighted rate: sum(rate * taxable) / sum(taxable).

    Zero when no gallons are taxable.
    """
    lines = list(lines)
    taxable = sum((line.taxable_gallons for line in lines), ZERO)
    if taxable <= 0:
        return ZERO
    return sum((line.tax_rate * line.taxable_gallons for line in lines), ZERO) / taxable


def reconciles(
    computation: TaxComputation, tolerance: Optional[Decimal] = None
) -> bool:
    """Check liabilities against taxable gallons times the weighted rate.

    The expected liability is rebuilt from each line's rate and taxable
    gallons. The rounded line liabilities, the reported total liability and
    ``total_taxable_gallons * weighted_average_rate`` must all agree with it
    within the rounding a cent per line can introduce (or ``tolerance``).
    """
    lines = computation.jurisdictions
    if tolerance is None:
        tolerance = max(LINE_ROUNDING_TOLERANCE * len(lines), Decimal("0.01"))

    expected = sum((line.tax_rate * line.taxable_gallons for line in lines), ZERO)
    line_liability = sum((line.tax_liability for line in lines), ZERO)
    stated = computation.total_taxable_gallons * computation.weighted_average_rate

    return (
        abs(expected - line_liability) <= tolerance
        and abs(expected - computation.total_liability) <= tolerance
        and abs(expected - stated) <= tolerance
    )
