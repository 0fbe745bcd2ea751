"""ORM models package."""
from .base import Base, Loggable, Resource
from .log import Log
from .user import User

__all__ = [
    "Base",
    "Log",
    "Loggable",
    "Resource",
    "User",
]
