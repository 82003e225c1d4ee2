"""Database models for the institution service."""

from .base import Base
from .classrooms import Classroom
from .institutions import Institution, InstitutionStatus

__all__ = [
    # Base
    "Base",
    # Enums
    "InstitutionStatus",
    # Models
    "Institution",
    "Classroom",
]
