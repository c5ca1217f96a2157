from app.models.companion import TravelCompanion
from app.models.user import User

__all__ = [
    "TravelCompanion",
    "User",
]
