"""Quarter-close workflow carrying one period through the IFTA engine."""

import logging
from typing import Iterable, Optional

from fleettax.domain.aggregator import aggregate, normalize_fuel_purchases, normalize_trips
from fleettax.domain.entities import (
    Aggregation,
    FuelPurchase,
    IftaPeriodData,
    Period,
    PeriodState,
    ReportInfo,
    TaxComputation,
    Trip,
)
from fleettax.domain.errors import LifecycleError, ValidationError, lifecycle_out_of_order
from fleettax.domain.report import assemble_period_data, validate_ifta_period_data
from fleettax.domain.tax import TaxComputer

logger = logging.getLogger(__name__)


class IftaPeriodWorkflow:
    """State machine for a period's report computation.

    EMPTY -> AGGREGATED -> COMPUTED -> VALIDATED -> (EXPORTED | PERSISTED)

    Each step only runs from its predecessor state; anything else raises
    LifecycleError. Results are read-only once validated.
    """

    def __init__(self, period: Period, tax_computer: TaxComputer):
        self.period = period
        self.tax_computer = tax_computer
        self.state = PeriodState.EMPTY
        self.trips: tuple[Trip, ...] = ()
        self.fuel_purchases: tuple[FuelPurchase, ...] = ()
        self.aggregation: Optional[Aggregation] = None
        self.computation: Optional[TaxComputation] = None
        self.data: Optional[IftaPeriodData] = None

    def _require(self, step: str, expected: PeriodState) -> None:
        if self.state is not expected:
            raise LifecycleError(lifecycle_out_of_order(step, self.state.value))

    def _advance(self, state: PeriodState) -> None:
        logger.debug(
            "ifta_period_transition",
            extra={"period": self.period.label, "from_state": self.state.value, "to_state": state.value},
        )
        self.state = state

    def aggregate(
        self, trips: Iterable[Trip], fuel_purchases: Iterable[FuelPurchase]
    ) -> Aggregation:
        """Normalize the period's records and aggregate them."""
        self._require("aggregate", PeriodState.EMPTY)
        self.trips = normalize_trips(trips)
        self.fuel_purchases = normalize_fuel_purchases(fuel_purchases)
        self.aggregation = aggregate(self.trips, self.fuel_purchases)
        self._advance(PeriodState.AGGREGATED)
        return self.aggregation

    def compute(self) -> TaxComputation:
        """Run the tax computer over the aggregation."""
        self._require("compute", PeriodState.AGGREGATED)
        self.computation = self.tax_computer.compute(self.aggregation, self.period)
        self._advance(PeriodState.COMPUTED)
        return self.computation

    def validate(self, report: Optional[ReportInfo] = None) -> IftaPeriodData:
        """Assemble the period data and check its structure.

        Raises:
            ValidationError: If the assembled data is not structurally valid;
                the workflow stays COMPUTED
        """
        self._require("validate", PeriodState.COMPUTED)
        data = assemble_period_data(
            period=self.period,
            summary=self.aggregation.summary,
            trips=self.trips,
            fuel_purchases=self.fuel_purchases,
            computation=self.computation,
            report=report,
        )
        if not validate_ifta_period_data(data):
            raise ValidationError(f"IFTA data for {self.period.label} failed validation")
        self.data = data
        self._advance(PeriodState.VALIDATED)
        return data

    def mark_exported(self) -> IftaPeriodData:
        self._require("export", PeriodState.VALIDATED)
        self._advance(PeriodState.EXPORTED)
        return self.data

    def mark_persisted(self) -> IftaPeriodData:
        self._require("persist", PeriodState.VALIDATED)
        self._advance(PeriodState.PERSISTED)
        return self.data

    def run(
        self,
        trips: Iterable[Trip],
        fuel_purchases: Iterable[FuelPurchase],
        report: Optional[ReportInfo] = None,
    ) -> IftaPeriodData:
        """Aggregate, compute and validate in one call."""
        self.aggregate(trips, fuel_purchases)
        self.compute()
        return self.validate(report)
