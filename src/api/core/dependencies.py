from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.modules.classroom.use_cases import ClassroomService
from src.modules.institution.store import InstitutionStore
from src.modules.institution.workflow import InstitutionCreationWorkflow


# Everything below is composed once in the application lifespan and stored on
# app.state; these providers only hand it out.


def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.session_factory


def get_institution_store(request: Request) -> InstitutionStore:
    return request.app.state.institution_store


def get_creation_workflow(request: Request) -> InstitutionCreationWorkflow:
    return request.app.state.creation_workflow


def get_classroom_service(request: Request) -> ClassroomService:
    return request.app.state.classroom_service


SessionFactoryDep = Annotated[
    async_sessionmaker[AsyncSession], Depends(get_session_factory)
]
InstitutionStoreDep = Annotated[InstitutionStore, Depends(get_institution_store)]
CreationWorkflowDep = Annotated[
    InstitutionCreationWorkflow, Depends(get_creation_workflow)
]
ClassroomServiceDep = Annotated[ClassroomService, Depends(get_classroom_service)]
