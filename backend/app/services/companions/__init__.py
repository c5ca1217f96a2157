from .dto import CompanionOut
from .service import CompanionService

__all__ = ["CompanionOut", "CompanionService"]
