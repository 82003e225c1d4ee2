"""Persistence for institution records."""

from datetime import datetime
from typing import Any, AsyncIterator
from uuid import UUID

from sqlalchemy import and_, delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.api.core.exceptions.base import InvalidTransitionError, NotFoundError
from src.api.core.messages import MessageCode
from src.core.base import BaseService
from src.database.models import Institution, InstitutionStatus
from src.modules.institution.status import ensure_switchable, ensure_transition

UPDATABLE_FIELDS = frozenset({"name", "address", "description", "email", "phone"})

LISTED_BY_DEFAULT = (InstitutionStatus.ACTIVE, InstitutionStatus.INACTIVE)


def institution_not_found(institution_id: UUID) -> NotFoundError:
    return NotFoundError(
        MessageCode.INSTITUTION_NOT_FOUND,
        details={"institution_id": str(institution_id)},
    )


class InstitutionStore(BaseService):
    """Async store over institution rows.

    Every mutation loads the row and writes it back through the ORM, so the
    UPDATE is guarded by the ``version`` column and a concurrent writer
    surfaces as ConcurrentModificationError instead of a lost update.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        page_size: int = 100,
    ):
        super().__init__(session_factory)
        self.page_size = page_size

    async def _load(
        self,
        session: AsyncSession,
        institution_id: UUID,
        include_pending: bool = False,
    ) -> Institution:
        institution = await session.get(Institution, institution_id)
        if institution is None:
            raise institution_not_found(institution_id)
        if institution.status == InstitutionStatus.PENDING and not include_pending:
            raise institution_not_found(institution_id)
        return institution

    async def create(self, institution: Institution) -> Institution:
        """Persist a new institution in PENDING status."""
        institution.status = InstitutionStatus.PENDING
        institution.user_ids = []
        institution.classrooms = []
        async with self.session_scope() as session:
            session.add(institution)
            await session.commit()
        self.logger.info("Institution persisted as pending", institution_id=str(institution.id))
        return institution

    async def get_by_id(self, institution_id: UUID) -> Institution:
        async with self.session_scope() as session:
            return await self._load(session, institution_id)

    async def iter_by_status(
        self, *statuses: InstitutionStatus
    ) -> AsyncIterator[Institution]:
        """Lazily yield institutions in the given statuses, oldest first.

        Rows are fetched in keyset pages of ``page_size``; calling the method
        again starts a fresh iteration.
        """
        statuses = statuses or LISTED_BY_DEFAULT
        cursor: tuple[datetime, UUID] | None = None
        while True:
            stmt = (
                select(Institution)
                .where(Institution.status.in_(statuses))
                .order_by(Institution.created_at, Institution.id)
                .limit(self.page_size)
            )
            if cursor is not None:
                created_at, last_id = cursor
                stmt = stmt.where(
                    or_(
                        Institution.created_at > created_at,
                        and_(
                            Institution.created_at == created_at,
                            Institution.id > last_id,
                        ),
                    )
                )
            async with self.session_scope() as session:
                page = list((await session.scalars(stmt)).all())

            for institution in page:
                yield institution

            if len(page) < self.page_size:
                return
            cursor = (page[-1].created_at, page[-1].id)

    async def list_by_status(self, *statuses: InstitutionStatus) -> list[Institution]:
        return [institution async for institution in self.iter_by_status(*statuses)]

    async def list_all(self) -> list[Institution]:
        """Default listing: everything except deleted records."""
        return await self.list_by_status(*LISTED_BY_DEFAULT)

    async def update(self, institution_id: UUID, mutation: dict[str, Any]) -> Institution:
        """Apply attribute changes. Status is never changed here."""
        async with self.session_scope() as session:
            institution = await self._load(session, institution_id)
            for field, value in mutation.items():
                if field in UPDATABLE_FIELDS:
                    setattr(institution, field, value)
            await session.commit()
            return institution

    async def change_status(
        self, institution_id: UUID, target: InstitutionStatus
    ) -> Institution:
        """Explicit ACTIVE <-> INACTIVE switch."""
        async with self.session_scope() as session:
            institution = await self._load(session, institution_id)
            ensure_switchable(institution.status, target)
            if institution.status == target:
                return institution
            institution.status = target
            await session.commit()
            return institution

    async def mark_deleted(self, institution_id: UUID) -> Institution:
        """Soft delete; live classrooms are soft-deleted with it."""
        async with self.session_scope() as session:
            institution = await self._load(session, institution_id)
            ensure_transition(institution.status, InstitutionStatus.DELETED)
            institution.status = InstitutionStatus.DELETED
            for classroom in institution.classrooms:
                if classroom.status != InstitutionStatus.DELETED:
                    classroom.status = InstitutionStatus.DELETED
                    classroom.deleted_by_cascade = True
            await session.commit()
            self.logger.info("Institution soft-deleted", institution_id=str(institution_id))
            return institution

    async def restore(self, institution_id: UUID) -> Institution:
        """Bring a deleted institution back as INACTIVE.

        Classrooms removed by the cascade come back as INACTIVE too; ones
        deleted on their own stay deleted.
        """
        async with self.session_scope() as session:
            institution = await self._load(session, institution_id)
            if institution.status != InstitutionStatus.DELETED:
                raise InvalidTransitionError(
                    details={
                        "institution_id": str(institution_id),
                        "current_status": institution.status.value,
                    },
                    message="Only deleted institutions can be restored",
                )
            institution.status = InstitutionStatus.INACTIVE
            for classroom in institution.classrooms:
                if classroom.deleted_by_cascade:
                    classroom.status = InstitutionStatus.INACTIVE
                    classroom.deleted_by_cascade = False
            await session.commit()
            self.logger.info("Institution restored", institution_id=str(institution_id))
            return institution

    async def commit_provisioned(
        self, institution_id: UUID, user_ids: list[str]
    ) -> Institution:
        """Link provisioned users and activate in a single write."""
        async with self.session_scope() as session:
            institution = await self._load(session, institution_id, include_pending=True)
            ensure_transition(institution.status, InstitutionStatus.ACTIVE)
            institution.user_ids = list(user_ids)
            institution.status = InstitutionStatus.ACTIVE
            await session.commit()
            return institution

    async def purge(self, institution_id: UUID) -> bool:
        """Hard-remove a pending institution. Returns False if nothing matched."""
        async with self.session_scope() as session:
            result = await session.execute(
                delete(Institution).where(
                    Institution.id == institution_id,
                    Institution.status == InstitutionStatus.PENDING,
                )
            )
            await session.commit()
        return result.rowcount > 0
