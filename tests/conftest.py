"""Global test configuration and fixtures for the institution service."""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from aiohttp.test_utils import TestServer
from asgi_lifespan import LifespanManager
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from src.database.connection import (
    create_engine_from_settings,
    create_schema,
    create_session_factory,
)
from src.modules.classroom.use_cases import ClassroomService
from src.modules.institution.infrastructure.user_client import UserProvisioningClient
from src.modules.institution.store import InstitutionStore
from src.modules.institution.workflow import InstitutionCreationWorkflow
from src.utils.settings.app import AppSettings
from src.utils.settings.database import DatabaseSettings
from src.utils.settings.user_service import UserServiceSettings

from tests.factories import ClassroomFactory, InstitutionFactory
from tests.utils.fake_user_service import FakeUserService

# Short enough to keep timeout tests fast, long enough for local round trips
USER_SERVICE_TEST_TIMEOUT = 0.5


@pytest.fixture
def institution_factory():
    return InstitutionFactory


@pytest.fixture
def classroom_factory():
    return ClassroomFactory


@pytest.fixture
def database_settings(tmp_path) -> DatabaseSettings:
    """A throwaway SQLite database file per test."""
    return DatabaseSettings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'institutions.db'}",
        DATABASE_AUTO_CREATE=True,
    )


@pytest_asyncio.fixture
async def async_engine(database_settings) -> AsyncGenerator[AsyncEngine, None]:
    engine = create_engine_from_settings(database_settings)
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(async_engine)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session used by tests to seed and inspect rows directly."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(session_factory) -> InstitutionStore:
    # Small pages so listings cross page boundaries
    return InstitutionStore(session_factory, page_size=2)


@pytest.fixture
def classroom_service(session_factory) -> ClassroomService:
    return ClassroomService(session_factory)


@pytest_asyncio.fixture
async def fake_user_service() -> AsyncGenerator[FakeUserService, None]:
    """Run the fake User service on a local port."""
    fake = FakeUserService()
    server = TestServer(fake.app)
    await server.start_server()
    fake.url = str(server.make_url("/"))
    yield fake
    await server.close()


@pytest.fixture
def user_service_settings(fake_user_service) -> UserServiceSettings:
    return UserServiceSettings(
        USER_SERVICE_URL=fake_user_service.url,
        USER_SERVICE_TIMEOUT=USER_SERVICE_TEST_TIMEOUT,
    )


@pytest_asyncio.fixture
async def user_client(
    user_service_settings,
) -> AsyncGenerator[UserProvisioningClient, None]:
    client = UserProvisioningClient(user_service_settings)
    await client.start()
    yield client
    await client.close()


@pytest_asyncio.fixture
async def workflow(
    store, user_client
) -> AsyncGenerator[InstitutionCreationWorkflow, None]:
    workflow = InstitutionCreationWorkflow(store, user_client)
    yield workflow
    await workflow.drain()


@pytest_asyncio.fixture
async def app(database_settings, user_service_settings) -> AsyncGenerator[FastAPI, None]:
    """Create FastAPI application with lifespan manager for testing."""
    from src.main import create_app

    application = create_app(
        app_settings=AppSettings(ENVIRONMENT="TEST", LIST_PAGE_SIZE=2),
        database_settings=database_settings,
        user_service_settings=user_service_settings,
    )
    async with LifespanManager(application):
        yield application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the API."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test-institution-service",
    ) as client:
        yield client


@pytest_asyncio.fixture
async def app_session(app: FastAPI) -> AsyncGenerator[AsyncSession, None]:
    """Session on the same database the running app uses."""
    async with app.state.session_factory() as session:
        yield session
