"""Test factories for institution service models."""

from .base import AsyncSQLAlchemyModelFactory
from .classrooms import ClassroomFactory
from .institutions import InstitutionFactory

__all__ = [
    "AsyncSQLAlchemyModelFactory",
    "ClassroomFactory",
    "InstitutionFactory",
]
