"""
user_model.py — User ORM Model
EcoSphere Seeder
"""

from sqlalchemy import Column, Integer, Float, String, DateTime, func
from sqlalchemy.dialects.postgresql import UUID
from ecosphere.database import Base


class User(Base):
    """App user with gamification / carbon metrics."""
    __tablename__ = "User"

    id = Column(UUID(as_uuid=False), primary_key=True, server_default=func.gen_random_uuid())
    email = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    password = Column(String, nullable=False)              # bcrypt hash
    level = Column(Integer, nullable=False, default=1)
    eco_score = Column("ecoScore", Integer, nullable=False, default=0)
    carbon_debt = Column("carbonDebt", Float, nullable=False, default=0.0)      # kg CO2 outstanding
    total_trees_planted = Column("totalTreesPlanted", Integer, nullable=False, default=0)
    oxygen_contribution = Column("oxygenContribution", Float, nullable=False, default=0.0)
    lifetime_carbon = Column("lifetimeCarbon", Float, nullable=False, default=0.0)
    trees_to_offset = Column("treesToOffset", Integer, nullable=False, default=0)
    created_at = Column("createdAt", DateTime(timezone=True), server_default=func.now())
