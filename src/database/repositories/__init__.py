"""
Database repositories for data access.
"""

from .base import BaseRepository
from .registration_repository import RegistrationRepository

__all__ = [
    "BaseRepository",
    "RegistrationRepository",
]
