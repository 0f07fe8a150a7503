"""Utilities for resolving organization and vehicle references to IDs."""

from fleettax.domain.errors import NotFoundError, organization_not_found, vehicle_not_found
from fleettax.domain.organization import OrganizationService, VehicleService


def _as_id(value: str | int) -> int | None:
    if isinstance(value, int):
        return value
    try:
        return int(value)
    except (ValueError, TypeError):
        return None


def resolve_organization(organization_service: OrganizationService, organization: str | int) -> int:
    """Resolve organization name or ID to organization ID.

    Args:
        organization_service: OrganizationService instance
        organization: Organization name, or ID (int or numeric string)

    Returns:
        Organization ID

    Raises:
        NotFoundError: If organization is not found
    """
    organization_id = _as_id(organization)
    if organization_id is not None:
        if organization_service.get_organization(organization_id) is None:
            raise NotFoundError(organization_not_found(organization_id))
        return organization_id

    found = organization_service.get_organization_by_name(organization)
    if found is None:
        raise NotFoundError(organization_not_found(organization))
    return found.id


def resolve_vehicle(
    vehicle_service: VehicleService, organization_id: int, vehicle: str | int
) -> int:
    """Resolve a vehicle unit number or ID within an organization.

    Unit numbers win over IDs, since fleets commonly use numeric unit
    numbers ("101").

    Raises:
        NotFoundError: If vehicle is not found in the organization
    """
    by_unit = vehicle_service.get_vehicle_by_unit_number(organization_id, str(vehicle))
    if by_unit is not None:
        return by_unit.id

    vehicle_id = _as_id(vehicle)
    if vehicle_id is not None and vehicle_service.get_vehicle(organization_id, vehicle_id):
        return vehicle_id

    raise NotFoundError(vehicle_not_found(vehicle, organization_id))
