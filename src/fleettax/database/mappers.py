"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the IFTA engine never sees ORM
rows and the schema can change without touching domain code.
"""

from fleettax.domain import entities as domain
from fleettax.database.models import (
    Organization as ORMOrganization,
    Vehicle as ORMVehicle,
    IftaTrip as ORMIftaTrip,
    IftaFuelPurchase as ORMIftaFuelPurchase,
    IftaReport as ORMIftaReport,
    IftaReportLine as ORMIftaReportLine,
)


def organization_to_domain(orm_organization: ORMOrganization) -> domain.Organization:
    """Convert SQLAlchemy Organization model to domain Organization entity."""
    return domain.Organization(
        id=orm_organization.id,
        name=orm_organization.name,
        created_at=orm_organization.created_at,
    )


def vehicle_to_domain(orm_vehicle: ORMVehicle) -> domain.Vehicle:
    """Convert SQLAlchemy Vehicle model to domain Vehicle entity."""
    return domain.Vehicle(
        id=orm_vehicle.id,
        organization_id=orm_vehicle.organization_id,
        unit_number=orm_vehicle.unit_number,
        make=orm_vehicle.make,
        model=orm_vehicle.model,
        created_at=orm_vehicle.created_at,
    )


def trip_to_domain(orm_trip: ORMIftaTrip) -> domain.Trip:
    """Convert SQLAlchemy IftaTrip model to domain Trip entity."""
    return domain.Trip(
        id=orm_trip.id,
        date=orm_trip.date,
        vehicle_id=orm_trip.vehicle_id,
        jurisdiction=orm_trip.jurisdiction,
        miles=orm_trip.distance,
        fuel_used=orm_trip.fuel_used,
        notes=orm_trip.notes,
    )


def fuel_purchase_to_domain(orm_purchase: ORMIftaFuelPurchase) -> domain.FuelPurchase:
    """Convert SQLAlchemy IftaFuelPurchase model to domain FuelPurchase entity."""
    return domain.FuelPurchase(
        id=orm_purchase.id,
        date=orm_purchase.date,
        vehicle_id=orm_purchase.vehicle_id,
        jurisdiction=orm_purchase.jurisdiction,
        gallons=orm_purchase.gallons,
        cost=orm_purchase.amount,
        vendor=orm_purchase.vendor,
        receipt_number=orm_purchase.receipt_number,
        notes=orm_purchase.notes,
    )


def report_line_to_domain(orm_line: ORMIftaReportLine) -> domain.IftaReportLine:
    """Convert SQLAlchemy IftaReportLine model to domain IftaReportLine entity."""
    return domain.IftaReportLine(
        jurisdiction=orm_line.jurisdiction,
        total_miles=orm_line.total_miles,
        taxable_gallons=orm_line.taxable_gallons,
        tax_paid_gallons=orm_line.tax_paid_gallons,
        tax_rate=orm_line.tax_rate,
        tax_owed=orm_line.tax_owed,
    )


def report_to_domain(orm_report: ORMIftaReport) -> domain.IftaReport:
    """Convert SQLAlchemy IftaReport model to domain IftaReport entity."""
    return domain.IftaReport(
        id=orm_report.id,
        organization_id=orm_report.organization_id,
        quarter=orm_report.quarter,
        year=orm_report.year,
        status=domain.ReportStatus(orm_report.status),
        due_date=orm_report.due_date,
        submitted_at=orm_report.submitted_at,
        total_miles=orm_report.total_miles,
        total_gallons=orm_report.total_gallons,
        average_mpg=orm_report.average_mpg,
        net_tax_due=orm_report.net_tax_due,
        created_at=orm_report.created_at,
        lines=tuple(report_line_to_domain(line) for line in orm_report.lines),
    )
