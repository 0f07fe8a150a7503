"""Tests for organization and vehicle services."""

import pytest

from fleettax.domain.errors import ConflictError, NotFoundError, ValidationError


class TestOrganizationService:
    """Tests for OrganizationService."""

    def test_create_organization(self, organization_service):
        organization_id = organization_service.create_organization("  Mesa Freight ")
        organization = organization_service.get_organization(organization_id)
        assert organization.name == "Mesa Freight"

    def test_blank_name_rejected(self, organization_service):
        with pytest.raises(ValidationError):
            organization_service.create_organization("   ")

    def test_duplicate_name_rejected(self, organization_service, sample_organization):
        with pytest.raises(ConflictError) as excinfo:
            organization_service.create_organization("Desert Haulers")
        assert "already exists" in str(excinfo.value)

    def test_get_by_name(self, organization_service, sample_organization):
        assert organization_service.get_organization_by_name("Desert Haulers") == sample_organization
        assert organization_service.get_organization_by_name("Nobody") is None

    def test_require_missing(self, organization_service):
        with pytest.raises(NotFoundError) as excinfo:
            organization_service.require_organization(42)
        assert "Organization 42 not found" in str(excinfo.value)

    def test_list_sorted_by_name(self, organization_service):
        organization_service.create_organization("Zeta Lines")
        organization_service.create_organization("Alpha Transport")
        names = [o.name for o in organization_service.list_organizations()]
        assert names == ["Alpha Transport", "Zeta Lines"]


class TestVehicleService:
    """Tests for VehicleService."""

    def test_create_vehicle(self, vehicle_service, sample_vehicle):
        assert sample_vehicle.unit_number == "101"
        assert sample_vehicle.make == "Freightliner"
        assert vehicle_service.get_vehicle_by_unit_number(
            sample_vehicle.organization_id, "101"
        ) == sample_vehicle

    def test_missing_organization(self, vehicle_service):
        with pytest.raises(NotFoundError):
            vehicle_service.create_vehicle(organization_id=99, unit_number="1")

    def test_blank_unit_number(self, vehicle_service, sample_organization):
        with pytest.raises(ValidationError):
            vehicle_service.create_vehicle(organization_id=sample_organization.id, unit_number=" ")

    def test_duplicate_unit_number(self, vehicle_service, sample_vehicle):
        with pytest.raises(ConflictError):
            vehicle_service.create_vehicle(
                organization_id=sample_vehicle.organization_id, unit_number="101"
            )

    def test_require_vehicle_across_tenants(
        self, organization_service, vehicle_service, sample_vehicle
    ):
        other_id = organization_service.create_organization("Other Fleet")
        with pytest.raises(NotFoundError) as excinfo:
            vehicle_service.require_vehicle(other_id, sample_vehicle.id)
        assert f"organization {other_id}" in str(excinfo.value)

    def test_list_vehicles(self, vehicle_service, sample_vehicle):
        vehicle_service.create_vehicle(
            organization_id=sample_vehicle.organization_id, unit_number="099"
        )
        units = [v.unit_number for v in vehicle_service.list_vehicles(sample_vehicle.organization_id)]
        assert units == ["099", "101"]
