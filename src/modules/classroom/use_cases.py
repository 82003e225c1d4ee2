from typing import Any
from uuid import UUID

from sqlalchemy import select

from src.api.core.exceptions.base import InvalidTransitionError, NotFoundError
from src.api.core.messages import MessageCode
from src.core.base import BaseService
from src.database.models import Classroom, Institution, InstitutionStatus
from src.modules.institution.status import ensure_switchable, ensure_transition
from src.modules.institution.store import institution_not_found

UPDATABLE_FIELDS = frozenset({"name", "type", "capacity"})


class ClassroomService(BaseService):
    """Classrooms are always addressed through their owning institution."""

    async def _load_institution(self, session, institution_id: UUID) -> Institution:
        institution = await session.get(Institution, institution_id)
        if institution is None or institution.status == InstitutionStatus.PENDING:
            raise institution_not_found(institution_id)
        return institution

    async def _load(self, session, institution_id: UUID, classroom_id: UUID) -> Classroom:
        await self._load_institution(session, institution_id)
        classroom = await session.get(Classroom, classroom_id)
        if classroom is None or classroom.institution_id != institution_id:
            raise NotFoundError(
                MessageCode.CLASSROOM_NOT_FOUND,
                details={
                    "institution_id": str(institution_id),
                    "classroom_id": str(classroom_id),
                },
            )
        return classroom

    async def create_classroom(
        self,
        institution_id: UUID,
        name: str,
        type: str,
        capacity: int | None = None,
    ) -> Classroom:
        async with self.session_scope() as session:
            institution = await self._load_institution(session, institution_id)
            if institution.status == InstitutionStatus.DELETED:
                raise InvalidTransitionError(
                    details={"institution_id": str(institution_id)},
                    message="Cannot add classrooms to a deleted institution",
                )
            classroom = Classroom(
                institution_id=institution_id,
                name=name,
                type=type,
                capacity=capacity,
                status=InstitutionStatus.ACTIVE,
                deleted_by_cascade=False,
            )
            session.add(classroom)
            await session.commit()
            self.logger.info(
                "Classroom created",
                institution_id=str(institution_id),
                classroom_id=str(classroom.id),
            )
            return classroom

    async def list_classrooms(
        self, institution_id: UUID, include_deleted: bool = False
    ) -> list[Classroom]:
        async with self.session_scope() as session:
            await self._load_institution(session, institution_id)
            stmt = (
                select(Classroom)
                .where(Classroom.institution_id == institution_id)
                .order_by(Classroom.created_at, Classroom.id)
            )
            if not include_deleted:
                stmt = stmt.where(Classroom.status != InstitutionStatus.DELETED)
            return list((await session.scalars(stmt)).all())

    async def get_classroom(self, institution_id: UUID, classroom_id: UUID) -> Classroom:
        async with self.session_scope() as session:
            return await self._load(session, institution_id, classroom_id)

    async def update_classroom(
        self, institution_id: UUID, classroom_id: UUID, mutation: dict[str, Any]
    ) -> Classroom:
        async with self.session_scope() as session:
            classroom = await self._load(session, institution_id, classroom_id)
            for field, value in mutation.items():
                if field in UPDATABLE_FIELDS:
                    setattr(classroom, field, value)
            await session.commit()
            return classroom

    async def change_status(
        self, institution_id: UUID, classroom_id: UUID, target: InstitutionStatus
    ) -> Classroom:
        async with self.session_scope() as session:
            classroom = await self._load(session, institution_id, classroom_id)
            ensure_switchable(classroom.status, target, resource="classroom")
            if classroom.status == target:
                return classroom
            classroom.status = target
            await session.commit()
            return classroom

    async def delete_classroom(self, institution_id: UUID, classroom_id: UUID) -> Classroom:
        async with self.session_scope() as session:
            classroom = await self._load(session, institution_id, classroom_id)
            ensure_transition(classroom.status, InstitutionStatus.DELETED, resource="classroom")
            classroom.status = InstitutionStatus.DELETED
            classroom.deleted_by_cascade = False
            await session.commit()
            return classroom

    async def restore_classroom(
        self, institution_id: UUID, classroom_id: UUID
    ) -> Classroom:
        async with self.session_scope() as session:
            institution = await self._load_institution(session, institution_id)
            classroom = await self._load(session, institution_id, classroom_id)
            if classroom.status != InstitutionStatus.DELETED:
                raise InvalidTransitionError(
                    details={
                        "classroom_id": str(classroom_id),
                        "current_status": classroom.status.value,
                    },
                    message="Only deleted classrooms can be restored",
                )
            if institution.status == InstitutionStatus.DELETED:
                raise InvalidTransitionError(
                    details={"institution_id": str(institution_id)},
                    message="Restore the institution before its classrooms",
                )
            classroom.status = InstitutionStatus.INACTIVE
            classroom.deleted_by_cascade = False
            await session.commit()
            return classroom
