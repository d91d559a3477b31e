# rentdesk/infrastructure/database/models.py

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from rentdesk.infrastructure.database.session import Base

JsonColumn = JSON().with_variant(JSONB(), "postgresql")
Money = Numeric(12, 2, asdecimal=False)


class TimestampedModel(Base):
    __abstract__ = True

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class AuthIdentity(Base):
    """Login credentials. Created first when provisioning a user, removed last on rollback."""

    __tablename__ = "auth_identities"

    id = Column(String(36), primary_key=True)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class User(TimestampedModel):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    email = Column(String(255), nullable=False, unique=True)
    role = Column(String(20), nullable=False, default="client")
    name = Column(String(100))
    surname = Column(String(100))
    phone = Column(String(50))
    telegram = Column(String(100))
    passport_number = Column(String(50))
    citizenship = Column(String(100))
    city = Column(String(100))
    is_active = Column(Boolean, nullable=False, default=True)


class Location(TimestampedModel):
    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)


class District(TimestampedModel):
    __tablename__ = "districts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    price_per_day = Column(Money)
    is_active = Column(Boolean, nullable=False, default=True)


class LocationSeason(TimestampedModel):
    __tablename__ = "location_seasons"

    id = Column(Integer, primary_key=True, autoincrement=True)
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    start_date = Column(String(5), nullable=False)
    end_date = Column(String(5), nullable=False)
    price_coefficient = Column(Float, nullable=False, default=1.0)


class Company(TimestampedModel):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    owner_id = Column(String(36), ForeignKey("users.id"), index=True)
    location_id = Column(Integer, ForeignKey("locations.id"))
    email = Column(String(255))
    phone = Column(String(50))
    address = Column(Text)
    is_active = Column(Boolean, nullable=False, default=True)
    settings = Column(JsonColumn, nullable=False, default=dict)


class Manager(TimestampedModel):
    __tablename__ = "managers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True)


class CarTemplate(TimestampedModel):
    __tablename__ = "car_templates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    brand = Column(String(100), nullable=False)
    model = Column(String(100), nullable=False)
    body_type = Column(String(50), nullable=False)
    seats = Column(Integer)
    doors = Column(Integer)
    transmission = Column(String(20))
    engine_volume = Column(Float)


class CompanyCar(TimestampedModel):
    __tablename__ = "company_cars"

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    car_template_id = Column(Integer, ForeignKey("car_templates.id"), nullable=False)
    license_plate = Column(String(20), nullable=False, unique=True)
    year = Column(Integer)
    color = Column(String(50))
    price_per_day = Column(Money, nullable=False)
    mileage = Column(Integer)
    status = Column(String(20), nullable=False, default="available")
    notes = Column(Text)


class Client(TimestampedModel):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), index=True)
    name = Column(String(100), nullable=False)
    surname = Column(String(100), nullable=False)
    phone = Column(String(50), nullable=False)
    email = Column(String(255))
    passport_number = Column(String(50), index=True)
    citizenship = Column(String(100))


class Contract(TimestampedModel):
    __tablename__ = "contracts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    company_car_id = Column(Integer, ForeignKey("company_cars.id"), nullable=False, index=True)
    manager_id = Column(String(36), ForeignKey("users.id"))
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    total_amount = Column(Money, nullable=False, default=0)
    deposit_amount = Column(Money, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="active")
    notes = Column(Text)


class Booking(TimestampedModel):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    company_car_id = Column(Integer, ForeignKey("company_cars.id"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    total_amount = Column(Money, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="pending", index=True)
    notes = Column(Text)


class Payment(TimestampedModel):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    contract_id = Column(Integer, ForeignKey("contracts.id"), nullable=False, index=True)
    amount = Column(Money, nullable=False)
    payment_method = Column(String(20), nullable=False, default="cash")
    status = Column(String(20), nullable=False, default="paid")
    notes = Column(Text)
    created_by = Column(String(36))


class Task(TimestampedModel):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey("companies.id"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    status = Column(String(20), nullable=False, default="todo")
    due_date = Column(Date)
    assigned_to = Column(String(36), ForeignKey("users.id"))
    created_by = Column(String(36))


class AuditLog(Base):
    """Append-only. Rows are removed only by the bulk clear operation."""

    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), index=True)
    role = Column(String(20))
    company_id = Column(Integer, index=True)
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(String(64))
    action = Column(String(20), nullable=False)
    before_state = Column(JsonColumn)
    after_state = Column(JsonColumn)
    ip = Column(String(64))
    user_agent = Column(String(512))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
