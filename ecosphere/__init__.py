"""EcoSphere development database seeder."""

__version__ = "1.0.0"
