import uvicorn
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.core.exceptions.base import register_exception_handlers
from src.api.core.middleware.logging import logging_middleware
from src.api.router import api_router
from src.database.connection import (
    create_engine_from_settings,
    create_schema,
    create_session_factory,
)
from src.modules.classroom.use_cases import ClassroomService
from src.modules.institution.infrastructure.user_client import UserProvisioningClient
from src.modules.institution.store import InstitutionStore
from src.modules.institution.workflow import InstitutionCreationWorkflow
from src.utils.logger import setup_logging
from src.utils.settings.app import AppSettings
from src.utils.settings.database import DatabaseSettings
from src.utils.settings.user_service import UserServiceSettings


def create_app(
    app_settings: AppSettings | None = None,
    database_settings: DatabaseSettings | None = None,
    user_service_settings: UserServiceSettings | None = None,
) -> FastAPI:
    """Build the application with explicitly wired components."""
    app_settings = app_settings or AppSettings()
    database_settings = database_settings or DatabaseSettings()
    user_service_settings = user_service_settings or UserServiceSettings()
    app_settings.validate_prod()
    is_production = app_settings.is_production

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger = setup_logging(is_production, debug=app_settings.DEBUG)
        logger.info("Starting institution service...")

        engine = create_engine_from_settings(database_settings)
        if database_settings.DATABASE_AUTO_CREATE:
            await create_schema(engine)
        session_factory = create_session_factory(engine)

        store = InstitutionStore(session_factory, page_size=app_settings.LIST_PAGE_SIZE)
        client = UserProvisioningClient(user_service_settings)
        await client.start()
        workflow = InstitutionCreationWorkflow(store, client)

        app.state.session_factory = session_factory
        app.state.institution_store = store
        app.state.user_client = client
        app.state.creation_workflow = workflow
        app.state.classroom_service = ClassroomService(session_factory)
        logger.info(
            "Components wired",
            user_service_url=user_service_settings.USER_SERVICE_URL,
            user_service_timeout=user_service_settings.USER_SERVICE_TIMEOUT,
        )

        try:
            yield
        finally:
            logger.info("Shutting down institution service...")
            # Creations must reach Committed or Failed before the client closes
            await workflow.drain()
            await client.close()
            await engine.dispose()

    app = FastAPI(
        title="Institution Service",
        description="Institutions and classrooms, with users provisioned in the User service",
        version=app_settings.API_VERSION,
        lifespan=lifespan,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
        openapi_url=None if is_production else "/openapi.json",
    )

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(logging_middleware)

    app.include_router(api_router)
    return app


app = create_app()


def run_dev_server():
    """Run development server with auto-reload."""
    uvicorn.run(
        "src.main:app", host="0.0.0.0", port=8080, reload=True, access_log=False
    )


def run_prod_server():
    """Run production server."""
    uvicorn.run(
        "src.main:app", host="0.0.0.0", port=8080, reload=False, access_log=False
    )
