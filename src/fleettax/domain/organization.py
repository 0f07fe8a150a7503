"""Organization and vehicle domain services."""

from typing import Optional
from fleettax.database.base import Database
from fleettax.domain.entities import Organization as OrganizationEntity
from fleettax.domain.entities import Vehicle as VehicleEntity
from fleettax.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    organization_not_found,
    vehicle_not_found,
)


class OrganizationService:
    """Service for managing tenant organizations."""

    def __init__(self, db: Database):
        """Initialize organization service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_organization(self, name: str) -> int:
        """Create a new organization.

        Args:
            name: Organization name

        Returns:
            Organization ID

        Raises:
            ValidationError: If name is blank
            ConflictError: If an organization with that name exists
        """
        name = name.strip()
        if not name:
            raise ValidationError("Organization name cannot be empty")
        if self.db.get_organization_by_name(name) is not None:
            raise ConflictError(f"Organization with name '{name}' already exists")
        return self.db.create_organization(name=name)

    def get_organization(self, organization_id: int) -> Optional[OrganizationEntity]:
        """Get organization by ID."""
        return self.db.get_organization(organization_id)

    def get_organization_by_name(self, name: str) -> Optional[OrganizationEntity]:
        """Get organization by name."""
        return self.db.get_organization_by_name(name)

    def require_organization(self, organization_id: int) -> OrganizationEntity:
        """Get organization by ID, raising if it does not exist.

        Raises:
            NotFoundError: If organization not found
        """
        organization = self.db.get_organization(organization_id)
        if organization is None:
            raise NotFoundError(organization_not_found(organization_id))
        return organization

    def list_organizations(self) -> list[OrganizationEntity]:
        """List all organizations."""
        return self.db.list_organizations()


class VehicleService:
    """Service for managing an organization's vehicles."""

    def __init__(self, db: Database):
        """Initialize vehicle service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_vehicle(
        self,
        organization_id: int,
        unit_number: str,
        make: Optional[str] = None,
        model: Optional[str] = None,
    ) -> int:
        """Create a vehicle.

        Args:
            organization_id: Owning organization
            unit_number: Fleet unit number, unique within the organization
            make: Optional manufacturer
            model: Optional model

        Returns:
            Vehicle ID

        Raises:
            NotFoundError: If organization doesn't exist
            ValidationError: If unit number is blank
            ConflictError: If the unit number is taken
        """
        if self.db.get_organization(organization_id) is None:
            raise NotFoundError(organization_not_found(organization_id))
        unit_number = unit_number.strip()
        if not unit_number:
            raise ValidationError("Vehicle unit number cannot be empty")
        if self.db.get_vehicle_by_unit_number(organization_id, unit_number) is not None:
            raise ConflictError(
                f"Vehicle '{unit_number}' already exists in organization {organization_id}"
            )
        return self.db.create_vehicle(
            organization_id=organization_id,
            unit_number=unit_number,
            make=make,
            model=model,
        )

    def get_vehicle(self, organization_id: int, vehicle_id: int) -> Optional[VehicleEntity]:
        """Get a vehicle within an organization."""
        return self.db.get_vehicle(organization_id, vehicle_id)

    def get_vehicle_by_unit_number(
        self, organization_id: int, unit_number: str
    ) -> Optional[VehicleEntity]:
        """Get a vehicle by unit number within an organization."""
        return self.db.get_vehicle_by_unit_number(organization_id, unit_number)

    def require_vehicle(self, organization_id: int, vehicle_id: int) -> VehicleEntity:
        """Get a vehicle, raising if it is not part of the organization.

        Raises:
            NotFoundError: If vehicle not found in the organization
        """
        vehicle = self.db.get_vehicle(organization_id, vehicle_id)
        if vehicle is None:
            raise NotFoundError(vehicle_not_found(vehicle_id, organization_id))
        return vehicle

    def list_vehicles(self, organization_id: int) -> list[VehicleEntity]:
        """List an organization's vehicles."""
        return self.db.list_vehicles(organization_id)
