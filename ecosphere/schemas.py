"""
schemas.py — Seed Fixture Schemas & Loader
EcoSphere Seeder

Seed rows live in a JSON fixture (``fixtures/default.json``) and are
validated here before anything touches the database.
"""

from datetime import datetime
from pathlib import Path
from typing import Annotated, List, Optional, Tuple, Union
from pydantic import AfterValidator, BaseModel, Field, field_validator, model_validator
from loguru import logger

from ecosphere.config import settings
from ecosphere.geo import Point, Polygon
from ecosphere.models.db_models import PlantationStatus

DEFAULT_FIXTURE = Path(__file__).parent / "fixtures" / "default.json"


def _check_point(v: Tuple[float, float]) -> Tuple[float, float]:
    Point.from_pair(v)
    return v


Coordinates = Annotated[Tuple[float, float], AfterValidator(_check_point)]    # [lon, lat]


# ── Entities ──────────────────────────────────────────────────────────────────
class UserSeed(BaseModel):
    name: str
    email: str
    level: int = Field(default=1, ge=1)
    eco_score: int = Field(default=0, ge=0)
    carbon_debt: float = Field(default=0.0, ge=0)
    total_trees_planted: int = Field(default=0, ge=0)
    oxygen_contribution: float = Field(default=0.0, ge=0)
    lifetime_carbon: float = Field(default=0.0, ge=0)
    trees_to_offset: int = Field(default=0, ge=0)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if "@" not in v:
            raise ValueError("email must contain '@'")
        return v.strip().lower()


class NGOSeed(BaseModel):
    name: str
    description: str = ""
    address: str = ""
    website: Optional[str] = None
    coordinates: Coordinates

    @property
    def point(self) -> Point:
        return Point.from_pair(self.coordinates)


class EventSeed(BaseModel):
    title: str
    description: str = ""
    organizer: str
    date: datetime
    time: str
    location_name: str
    coordinates: Coordinates
    current_participants: int = Field(default=0, ge=0)
    max_participants: int = Field(ge=1)
    host_email: str

    @field_validator("host_email")
    @classmethod
    def normalise_host(cls, v: str) -> str:
        return v.strip().lower()

    @model_validator(mode="after")
    def check_capacity(self) -> "EventSeed":
        if self.current_participants > self.max_participants:
            raise ValueError(
                f"'{self.title}': current_participants ({self.current_participants}) "
                f"exceeds max_participants ({self.max_participants})"
            )
        return self

    @property
    def point(self) -> Point:
        return Point.from_pair(self.coordinates)


class PlantationEventSeed(BaseModel):
    title: str
    description: str = ""
    organizer_name: str
    date: datetime
    location_name: str
    site_boundary: List[Coordinates]
    centroid: Coordinates
    trees_goal: int = Field(ge=1)
    trees_planted: int = Field(default=0, ge=0)
    status: PlantationStatus = PlantationStatus.UPCOMING

    @model_validator(mode="after")
    def check_site(self) -> "PlantationEventSeed":
        if self.trees_planted > self.trees_goal:
            raise ValueError(
                f"'{self.title}': trees_planted ({self.trees_planted}) exceeds trees_goal ({self.trees_goal})"
            )
        boundary = self.boundary          # raises on an open / degenerate ring
        if not boundary.bbox_contains(self.centroid_point):
            raise ValueError(f"'{self.title}': centroid lies outside the site boundary")
        return self

    @property
    def boundary(self) -> Polygon:
        return Polygon.from_pairs(self.site_boundary)

    @property
    def centroid_point(self) -> Point:
        return Point.from_pair(self.centroid)


class AQIRecordSeed(BaseModel):
    value: int = Field(ge=0)
    location_name: str
    coordinates: Coordinates
    timestamp: datetime

    @property
    def point(self) -> Point:
        return Point.from_pair(self.coordinates)


# ── Fixture ───────────────────────────────────────────────────────────────────
class SeedFixture(BaseModel):
    placeholder_password: str
    users: List[UserSeed]
    ngos: List[NGOSeed] = []
    events: List[EventSeed] = []
    plantation_events: List[PlantationEventSeed] = []
    aqi_records: List[AQIRecordSeed] = []

    @field_validator("placeholder_password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v) < 8:
            raise ValueError("placeholder_password must be at least 8 characters")
        return v

    @model_validator(mode="after")
    def check_references(self) -> "SeedFixture":
        emails = [u.email for u in self.users]
        if len(set(emails)) != len(emails):
            raise ValueError("user emails must be unique")
        unknown = sorted({e.host_email for e in self.events} - set(emails))
        if unknown:
            raise ValueError(f"events reference unknown hosts: {unknown}")
        return self

    @property
    def host_emails(self) -> List[str]:
        seen: List[str] = []
        for e in self.events:
            if e.host_email not in seen:
                seen.append(e.host_email)
        return seen


def load_fixture(path: Optional[Union[str, Path]] = None) -> SeedFixture:
    """
    Load and validate a seed fixture.

    Resolution order: explicit path, SEED_FIXTURE_PATH, packaged default.
    """
    source = Path(path or settings.SEED_FIXTURE_PATH or DEFAULT_FIXTURE)
    fixture = SeedFixture.model_validate_json(source.read_text(encoding="utf-8"))
    logger.debug(f"Loaded fixture {source} ({len(fixture.users)} users).")
    return fixture
