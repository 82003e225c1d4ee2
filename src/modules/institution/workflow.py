"""Institution creation with remote user provisioning and compensation."""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID

from src.api.core.exceptions.base import (
    CompensationError,
    InstitutionAPIException,
    ProvisioningError,
)
from src.modules.institution.models import UserSpec
from src.database.models import Institution
from src.modules.institution.infrastructure.user_client import UserProvisioningClient
from src.modules.institution.store import InstitutionStore
from src.utils.logger import get_logger

logger = get_logger(__name__)


class CreationState(str, Enum):
    START = "start"
    PROVISIONING_USERS = "provisioning_users"
    COMMITTED = "committed"
    COMPENSATING = "compensating"
    FAILED = "failed"


@dataclass
class CreationRun:
    """Bookkeeping for a single creation request."""

    institution_id: UUID | None = None
    state: CreationState = CreationState.START
    created_user_ids: list[str] = field(default_factory=list)
    failed_index: int | None = None
    outcome_unknown: bool = False
    cause: str | None = None

    def move_to(self, state: CreationState) -> None:
        logger.debug(
            "Creation state change",
            institution_id=str(self.institution_id) if self.institution_id else None,
            from_state=self.state.value,
            to_state=state.value,
        )
        self.state = state


class InstitutionCreationWorkflow:
    """Creates an institution and its users as one unit from the caller's view.

    The institution is stored PENDING, users are provisioned remotely, and
    only then are ``user_ids`` and ACTIVE written together. On any failure the
    created users are deleted and the pending row is hard-removed. Runs are
    shielded from caller cancellation and tracked so shutdown can wait on them.
    """

    def __init__(self, store: InstitutionStore, client: UserProvisioningClient):
        self.store = store
        self.client = client
        self._in_flight: set[asyncio.Task] = set()

    async def create(
        self, attributes: dict, users: list[UserSpec]
    ) -> Institution:
        task = asyncio.create_task(self._run(attributes, list(users)))
        self._in_flight.add(task)
        task.add_done_callback(self._forget)
        # The caller going away must not leave a pending row or orphaned users
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            logger.info("Caller cancelled, creation continues in background")
            raise

    def _forget(self, task: asyncio.Task) -> None:
        self._in_flight.discard(task)
        # Mark the outcome as retrieved when nobody awaits the task anymore
        if not task.cancelled():
            task.exception()

    async def drain(self) -> None:
        """Wait for every in-flight run to reach a terminal state."""
        if self._in_flight:
            logger.info("Waiting for in-flight creations", count=len(self._in_flight))
            await asyncio.gather(*self._in_flight, return_exceptions=True)

    async def _run(self, attributes: dict, users: list[UserSpec]) -> Institution:
        run = CreationRun()
        institution = await self.store.create(Institution(**attributes))
        run.institution_id = institution.id

        run.move_to(CreationState.PROVISIONING_USERS)
        result = await self.client.create_users(institution.id, users)
        run.created_user_ids = list(result.created_ids)

        if result.succeeded:
            try:
                institution = await self.store.commit_provisioned(
                    institution.id, result.created_ids
                )
            except InstitutionAPIException as e:
                run.cause = f"Commit failed: {e.message}"
            else:
                run.move_to(CreationState.COMMITTED)
                logger.info(
                    "Institution created",
                    institution_id=str(institution.id),
                    user_count=len(result.created_ids),
                )
                return institution
        else:
            run.failed_index = result.failed_index
            run.outcome_unknown = result.error.outcome_unknown
            run.cause = str(result.error)

        await self._compensate(run)
        # _compensate only returns when every cleanup step succeeded
        raise ProvisioningError(details=self._failure_details(run))

    async def _compensate(self, run: CreationRun) -> None:
        run.move_to(CreationState.COMPENSATING)
        orphaned_users: list[str] = []
        if run.created_user_ids:
            outcomes = await self.client.delete_users(run.created_user_ids)
            orphaned_users = [o.user_id for o in outcomes if not o.success]

        try:
            institution_removed = await self.store.purge(run.institution_id)
        except InstitutionAPIException as e:
            institution_removed = False
            logger.error(
                "Could not remove pending institution",
                institution_id=str(run.institution_id),
                error=e.message,
            )
        else:
            if not institution_removed:
                # The row is no longer PENDING, e.g. a commit that landed but
                # reported failure
                logger.error(
                    "Pending institution not found for removal",
                    institution_id=str(run.institution_id),
                )

        run.move_to(CreationState.FAILED)
        if run.outcome_unknown:
            logger.warning(
                "Remote outcome of failed user creation is unknown",
                institution_id=str(run.institution_id),
                failed_index=run.failed_index,
            )

        if orphaned_users or not institution_removed:
            details = self._failure_details(run)
            details["orphaned_user_ids"] = orphaned_users
            details["pending_institution_removed"] = institution_removed
            logger.critical(
                "Compensation incomplete, manual reconciliation required",
                **details,
            )
            raise CompensationError(details=details)

        logger.warning(
            "User provisioning failed, creation rolled back",
            institution_id=str(run.institution_id),
            deleted_user_ids=run.created_user_ids,
        )

    @staticmethod
    def _failure_details(run: CreationRun) -> dict:
        return {
            "institution_id": str(run.institution_id),
            "failed_user_index": run.failed_index,
            "created_user_ids": run.created_user_ids,
            "remote_outcome_unknown": run.outcome_unknown,
            "cause": run.cause,
        }


__all__ = [
    "CreationRun",
    "CreationState",
    "InstitutionCreationWorkflow",
]
