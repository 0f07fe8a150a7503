"""Shared domain error messages and error types."""

from typing import Any, Iterable


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class LifecycleError(DomainError):
    """A reporting step was invoked before its predecessor completed."""


class InvalidPeriod(ValidationError):
    """Quarter or year outside the accepted domain."""

    def __init__(self, quarter: Any, year: Any):
        self.quarter = quarter
        self.year = year
        super().__init__(invalid_period(quarter, year))


class MalformedRecord(ValidationError):
    """A trip or fuel purchase carries an invalid field value."""

    def __init__(
        self,
        kind: str,
        field: str,
        value: Any,
        index: int | None = None,
        reason: str = "must be a non-negative number",
    ):
        self.kind = kind
        self.field = field
        self.value = value
        self.index = index
        super().__init__(malformed_record(kind, field, value, index, reason))


class UnknownJurisdiction(NotFoundError):
    """One or more jurisdictions have no rate entry."""

    def __init__(self, jurisdictions: Iterable[str]):
        self.jurisdictions = tuple(sorted(set(jurisdictions)))
        super().__init__(unknown_jurisdiction(self.jurisdictions))


def invalid_period(quarter: Any, year: Any) -> str:
    """Return message for an out-of-range reporting period."""
    return f"Invalid period: quarter {quarter!r}, year {year!r}"


def malformed_record(
    kind: str, field: str, value: Any, index: int | None, reason: str
) -> str:
    """Return message for a trip or fuel purchase with a bad field."""
    position = f" #{index}" if index is not None else ""
    return f"Malformed {kind}{position}: {field} {reason}, got {value!r}"


def unknown_jurisdiction(codes: tuple[str, ...]) -> str:
    """Return message for jurisdictions missing from the rate table."""
    joined = ", ".join(codes)
    plural = "s" if len(codes) != 1 else ""
    return f"No tax rate for jurisdiction{plural}: {joined}"


def organization_not_found(organization: int | str) -> str:
    """Return message for missing organization."""
    if isinstance(organization, int):
        return f"Organization {organization} not found"
    return f"Organization '{organization}' not found"


def vehicle_not_found(vehicle: int | str, organization_id: int) -> str:
    """Return message for a vehicle missing from an organization."""
    if isinstance(vehicle, int):
        return f"Vehicle {vehicle} not found in organization {organization_id}"
    return f"Vehicle '{vehicle}' not found in organization {organization_id}"


def trip_not_found(trip_id: int) -> str:
    """Return message for missing trip."""
    return f"Trip {trip_id} not found"


def fuel_purchase_not_found(purchase_id: int) -> str:
    """Return message for missing fuel purchase."""
    return f"Fuel purchase {purchase_id} not found"


def report_not_found(report_id: int) -> str:
    """Return message for missing IFTA report."""
    return f"IFTA report {report_id} not found"


def report_not_editable(label: str, status: str) -> str:
    """Return message when a report can no longer be regenerated."""
    return f"IFTA report for {label} is {status} and cannot be regenerated"


def invalid_status_transition(current: str, target: str) -> str:
    """Return message for a disallowed report status change."""
    return f"Cannot change report status from {current} to {target}"


def cannot_apportion(total_miles: Any) -> str:
    """Return message when fleet MPG cannot be derived."""
    return (
        f"Cannot apportion {total_miles} miles: fleet average MPG is zero "
        "(no usable fuel purchases in the period)"
    )


def lifecycle_out_of_order(step: str, state: str) -> str:
    """Return message for a workflow step invoked from the wrong state."""
    return f"Cannot {step} a period in state {state}"
