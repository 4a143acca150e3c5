from ecosphere.models.user_model import User
from ecosphere.models.db_models import NGO, Event, PlantationEvent, AQIRecord, PlantationStatus

__all__ = ["User", "NGO", "Event", "PlantationEvent", "AQIRecord", "PlantationStatus"]
