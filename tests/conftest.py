"""Shared pytest fixtures for fleettax tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from fleettax.database.factories import create_sqlite_database
from fleettax.domain.entities import FuelPurchase, Period, Trip
from fleettax.domain.ifta import IftaService
from fleettax.domain.organization import OrganizationService, VehicleService
from fleettax.logging_config import reset_logging


@pytest.fixture(autouse=True)
def _reset_package_logging():
    """CLI invocations install a handler; drop it so caplog keeps working."""
    yield
    reset_logging()


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def organization_service(temp_db):
    """Create an OrganizationService with a temporary database."""
    return OrganizationService(temp_db)


@pytest.fixture
def vehicle_service(temp_db):
    """Create a VehicleService with a temporary database."""
    return VehicleService(temp_db)


@pytest.fixture
def ifta_service(temp_db):
    """Create an IftaService with the default rate table."""
    return IftaService(temp_db)


@pytest.fixture
def sample_organization(organization_service):
    """Create a sample organization for testing."""
    organization_id = organization_service.create_organization(name="Desert Haulers")
    return organization_service.get_organization(organization_id)


@pytest.fixture
def sample_vehicle(vehicle_service, sample_organization):
    """Create a sample vehicle in the sample organization."""
    vehicle_id = vehicle_service.create_vehicle(
        organization_id=sample_organization.id,
        unit_number="101",
        make="Freightliner",
        model="Cascadia",
    )
    return vehicle_service.get_vehicle(sample_organization.id, vehicle_id)


@pytest.fixture
def q1_2025():
    return Period(quarter=1, year=2025)


@pytest.fixture
def sample_trips():
    """1,000 miles: 600 in Texas, 400 in New Mexico."""
    return [
        Trip(jurisdiction="TX", miles=Decimal("350")),
        Trip(jurisdiction="tx", miles=Decimal("250")),
        Trip(jurisdiction="NM", miles=Decimal("400")),
    ]


@pytest.fixture
def sample_fuel_purchases():
    """200 gallons, all bought in Texas."""
    return [
        FuelPurchase(jurisdiction="TX", gallons=Decimal("120"), cost=Decimal("420.00")),
        FuelPurchase(jurisdiction="TX", gallons=Decimal("80"), cost=Decimal("280.00")),
    ]


@pytest.fixture
def logged_quarter(ifta_service, sample_organization, sample_vehicle):
    """Store the sample trips and purchases in Q1 2025, plus one Q2 trip."""
    org_id = sample_organization.id
    vehicle_id = sample_vehicle.id
    ifta_service.log_trip(org_id, vehicle_id, date(2025, 1, 10), "TX", Decimal("350"))
    ifta_service.log_trip(org_id, vehicle_id, date(2025, 2, 14), "TX", Decimal("250"))
    ifta_service.log_trip(org_id, vehicle_id, date(2025, 3, 31), "NM", Decimal("400"))
    ifta_service.log_trip(org_id, vehicle_id, date(2025, 4, 1), "NM", Decimal("999"))
    ifta_service.log_fuel_purchase(
        org_id, vehicle_id, date(2025, 1, 9), "TX", Decimal("120"), Decimal("420.00")
    )
    ifta_service.log_fuel_purchase(
        org_id, vehicle_id, date(2025, 2, 13), "TX", Decimal("80"), Decimal("280.00"),
        vendor="Love's",
    )
    return org_id


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
