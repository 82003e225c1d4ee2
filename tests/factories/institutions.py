"""Factory for Institution models."""

import factory
from src.database.models import Institution, InstitutionStatus
from .base import AsyncSQLAlchemyModelFactory, UUIDFactory


class InstitutionFactory(AsyncSQLAlchemyModelFactory[Institution]):
    """Factory for creating Institution instances."""

    class Meta:
        model = Institution

    id = UUIDFactory()
    name = factory.Faker("company")
    address = factory.Faker("address")
    email = factory.Faker("company_email")
    status = InstitutionStatus.ACTIVE
    user_ids = factory.LazyFunction(list)
    classrooms = factory.LazyFunction(list)
