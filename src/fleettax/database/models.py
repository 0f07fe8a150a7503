"""SQLAlchemy models for fleettax database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class Organization(Base):
    """Tenant organization model."""

    __tablename__ = "organizations"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    vehicles = relationship("Vehicle", back_populates="organization", cascade="all, delete-orphan")
    ifta_reports = relationship(
        "IftaReport", back_populates="organization", cascade="all, delete-orphan"
    )


class Vehicle(Base):
    """Fleet vehicle model."""

    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False)
    unit_number = Column(String, nullable=False)
    make = Column(String, nullable=True)
    model = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        UniqueConstraint("organization_id", "unit_number", name="uq_vehicle_unit_number"),
    )

    # Relationships
    organization = relationship("Organization", back_populates="vehicles")
    trips = relationship("IftaTrip", back_populates="vehicle", cascade="all, delete-orphan")
    fuel_purchases = relationship(
        "IftaFuelPurchase", back_populates="vehicle", cascade="all, delete-orphan"
    )


class IftaTrip(Base):
    """Miles driven by a vehicle in one jurisdiction on one day."""

    __tablename__ = "ifta_trips"

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False)
    date = Column(Date, nullable=False, index=True)
    jurisdiction = Column(String, nullable=False)
    distance = Column(Numeric(12, 3), nullable=False)
    fuel_used = Column(Numeric(12, 3), nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    vehicle = relationship("Vehicle", back_populates="trips")


class IftaFuelPurchase(Base):
    """Fuel bought for a vehicle in one jurisdiction."""

    __tablename__ = "ifta_fuel_purchases"

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False)
    date = Column(Date, nullable=False, index=True)
    jurisdiction = Column(String, nullable=False)
    gallons = Column(Numeric(12, 3), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    vendor = Column(String, nullable=True)
    receipt_number = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    vehicle = relationship("Vehicle", back_populates="fuel_purchases")


class IftaReport(Base):
    """Quarterly IFTA report model."""

    __tablename__ = "ifta_reports"

    id = Column(Integer, primary_key=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False)
    quarter = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    status = Column(String, nullable=False, default="draft")
    due_date = Column(Date, nullable=False)
    submitted_at = Column(DateTime, nullable=True)
    total_miles = Column(Numeric(12, 3), nullable=False)
    total_gallons = Column(Numeric(12, 3), nullable=False)
    average_mpg = Column(Numeric(8, 2), nullable=False)
    net_tax_due = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # One report per organization and quarter
    __table_args__ = (
        UniqueConstraint("organization_id", "year", "quarter", name="uq_report_period"),
    )

    # Relationships
    organization = relationship("Organization", back_populates="ifta_reports")
    lines = relationship(
        "IftaReportLine",
        back_populates="report",
        cascade="all, delete-orphan",
        order_by="IftaReportLine.jurisdiction",
    )


class IftaReportLine(Base):
    """Per-jurisdiction line of an IFTA report."""

    __tablename__ = "ifta_report_lines"

    id = Column(Integer, primary_key=True)
    report_id = Column(Integer, ForeignKey("ifta_reports.id"), nullable=False)
    jurisdiction = Column(String, nullable=False)
    total_miles = Column(Numeric(12, 3), nullable=False)
    taxable_gallons = Column(Numeric(12, 3), nullable=False)
    tax_paid_gallons = Column(Numeric(12, 3), nullable=False)
    tax_rate = Column(Numeric(8, 4), nullable=False)
    tax_owed = Column(Numeric(12, 2), nullable=False)

    # Relationships
    report = relationship("IftaReport", back_populates="lines")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
