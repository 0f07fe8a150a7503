"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional, Sequence
from datetime import date, datetime
from decimal import Decimal

# Import entities directly; the domain package re-exports nothing
from fleettax.domain.entities import (
    Organization,
    Vehicle,
    Trip,
    FuelPurchase,
    IftaReport,
    IftaReportLine,
)


class Database(ABC):
    """Abstract database interface for fleettax.

    Every trip, fuel purchase and report query is scoped by organization_id;
    there is no ambient tenant.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Organization operations
    @abstractmethod
    def create_organization(self, name: str) -> int:
        """Create an organization. Returns organization ID."""
        pass

    @abstractmethod
    def get_organization(self, organization_id: int) -> Optional[Organization]:
        """Get organization by ID."""
        pass

    @abstractmethod
    def get_organization_by_name(self, name: str) -> Optional[Organization]:
        """Get organization by name."""
        pass

    @abstractmethod
    def list_organizations(self) -> list[Organization]:
        """List all organizations."""
        pass

    # Vehicle operations
    @abstractmethod
    def create_vehicle(
        self,
        organization_id: int,
        unit_number: str,
        make: Optional[str] = None,
        model: Optional[str] = None,
    ) -> int:
        """Create a vehicle. Returns vehicle ID."""
        pass

    @abstractmethod
    def get_vehicle(self, organization_id: int, vehicle_id: int) -> Optional[Vehicle]:
        """Get a vehicle belonging to an organization."""
        pass

    @abstractmethod
    def get_vehicle_by_unit_number(
        self, organization_id: int, unit_number: str
    ) -> Optional[Vehicle]:
        """Get a vehicle by its unit number within an organization."""
        pass

    @abstractmethod
    def list_vehicles(self, organization_id: int) -> list[Vehicle]:
        """List an organization's vehicles."""
        pass

    # Trip operations
    @abstractmethod
    def create_trip(
        self,
        organization_id: int,
        vehicle_id: int,
        date: date,
        jurisdiction: str,
        miles: Decimal,
        fuel_used: Optional[Decimal] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Create a trip record. Returns trip ID."""
        pass

    @abstractmethod
    def delete_trip(self, organization_id: int, trip_id: int) -> bool:
        """Delete a trip. Returns False if it does not exist in the organization."""
        pass

    @abstractmethod
    def list_trips(
        self,
        organization_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        vehicle_id: Optional[int] = None,
        jurisdiction: Optional[str] = None,
    ) -> list[Trip]:
        """List trips with optional filters, newest first."""
        pass

    # Fuel purchase operations
    @abstractmethod
    def create_fuel_purchase(
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
        """Create a fuel purchase record. Returns purchase ID."""
        pass

    @abstractmethod
    def delete_fuel_purchase(self, organization_id: int, purchase_id: int) -> bool:
        """Delete a fuel purchase. Returns False if it does not exist in the organization."""
        pass

    @abstractmethod
    def list_fuel_purchases(
        self,
        organization_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        vehicle_id: Optional[int] = None,
        jurisdiction: Optional[str] = None,
    ) -> list[FuelPurchase]:
        """List fuel purchases with optional filters, newest first."""
        pass

    # IFTA report operations
    @abstractmethod
    def get_ifta_report(
        self, organization_id: int, quarter: int, year: int
    ) -> Optional[IftaReport]:
        """Get the report for an organization's quarter."""
        pass

    @abstractmethod
    def get_ifta_report_by_id(
        self, organization_id: int, report_id: int
    ) -> Optional[IftaReport]:
        """Get a report by ID within an organization."""
        pass

    @abstractmethod
    def save_ifta_report(
        self,
        organization_id: int,
        quarter: int,
        year: int,
        due_date: date,
        total_miles: Decimal,
        total_gallons: Decimal,
        average_mpg: Decimal,
        net_tax_due: Decimal,
        lines: Sequence[IftaReportLine],
    ) -> int:
        """Create or replace the draft report for a quarter. Returns report ID."""
        pass

    @abstractmethod
    def update_ifta_report_status(
        self,
        organization_id: int,
        report_id: int,
        status: str,
        submitted_at: Optional[datetime] = None,
    ) -> None:
        """Set a report's status (and submission time when given).

        Moving back to draft clears any earlier submission time.
        """
        pass

    @abstractmethod
    def list_ifta_reports(
        self, organization_id: int, year: Optional[int] = None
    ) -> list[IftaReport]:
        """List an organization's reports, newest period first."""
        pass
