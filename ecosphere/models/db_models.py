"""
db_models.py — SQLAlchemy ORM Models (PostGIS-enabled)
EcoSphere Seeder

Table and column names follow the application's existing schema.
"""

from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, Text,
    Enum as SAEnum, UniqueConstraint, Index, func,
)
from sqlalchemy.dialects.postgresql import UUID
from geoalchemy2 import Geometry
from ecosphere.database import Base
from ecosphere.geo import SRID
import enum


# ── Enums ─────────────────────────────────────────────────────────────────────
class PlantationStatus(str, enum.Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"


# ── NGO ───────────────────────────────────────────────────────────────────────
class NGO(Base):
    """Environmental organisation with a map location."""
    __tablename__ = "NGO"

    id = Column(UUID(as_uuid=False), primary_key=True, server_default=func.gen_random_uuid())
    name = Column(String, unique=True, nullable=False)
    description = Column(Text)
    address = Column(String)
    website = Column(String)
    coordinates = Column(Geometry("POINT", srid=SRID))
    created_at = Column("createdAt", DateTime(timezone=True), server_default=func.now())


# ── Community Events ──────────────────────────────────────────────────────────
class Event(Base):
    """Community event hosted by a user."""
    __tablename__ = "Event"

    id = Column(UUID(as_uuid=False), primary_key=True, server_default=func.gen_random_uuid())
    title = Column(String, nullable=False)
    description = Column(Text)
    organizer = Column(String)                          # free text, not a FK
    date = Column(DateTime(timezone=True), nullable=False)
    time = Column(String(20))                           # display string, e.g. "10:00 AM"
    location_name = Column("locationName", String)
    coordinates = Column(Geometry("POINT", srid=SRID))
    current_participants = Column("currentParticipants", Integer, nullable=False, default=0)
    max_participants = Column("maxParticipants", Integer, nullable=False)
    host_id = Column("hostId", UUID(as_uuid=False), ForeignKey("User.id"), nullable=False)
    created_at = Column("createdAt", DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("title", "date", name="uq_event_title_date"),
    )


# ── Plantation Events ─────────────────────────────────────────────────────────
class PlantationEvent(Base):
    """Tree-planting drive over a polygon site."""
    __tablename__ = "PlantationEvent"

    id = Column(UUID(as_uuid=False), primary_key=True, server_default=func.gen_random_uuid())
    title = Column(String, nullable=False)
    description = Column(Text)
    organizer_name = Column("organizerName", String)
    date = Column(DateTime(timezone=True), nullable=False)
    location_name = Column("locationName", String)
    site_boundary = Column("siteBoundary", Geometry("POLYGON", srid=SRID))
    centroid = Column(Geometry("POINT", srid=SRID))
    trees_goal = Column("treesGoal", Integer, nullable=False)
    trees_planted = Column("treesPlanted", Integer, nullable=False, default=0)
    status = Column(
        SAEnum(
            PlantationStatus,
            native_enum=False,
            length=20,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=PlantationStatus.UPCOMING,
    )
    created_at = Column("createdAt", DateTime(timezone=True), server_default=func.now())
    updated_at = Column("updatedAt", DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("title", "date", name="uq_plantation_title_date"),
        Index("idx_plantation_status", "status"),
    )


# ── AQI Records ───────────────────────────────────────────────────────────────
class AQIRecord(Base):
    """Air-quality index snapshot at a location."""
    __tablename__ = "AQIRecord"

    id = Column(UUID(as_uuid=False), primary_key=True, server_default=func.gen_random_uuid())
    value = Column(Integer, nullable=False)
    location_name = Column("locationName", String)
    coordinates = Column(Geometry("POINT", srid=SRID))
    timestamp = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("locationName", "timestamp", name="uq_aqi_location_time"),
    )
