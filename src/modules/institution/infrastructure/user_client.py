"""Client for the external User service."""

import asyncio
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

import aiohttp

from src.modules.institution.models import UserSpec
from src.utils.logger import get_logger
from src.utils.settings.user_service import UserServiceSettings

logger = get_logger(__name__)


class UserServiceError(Exception):
    """A single call to the User service failed."""

    def __init__(self, message: str, outcome_unknown: bool = False):
        super().__init__(message)
        # True when the request may have been applied remotely (timeout,
        # dropped connection) even though we saw no response.
        self.outcome_unknown = outcome_unknown


@dataclass
class ProvisioningResult:
    """Outcome of ``create_users``.

    ``created_ids`` always holds the users that were confirmed created, in
    request order, so the caller can compensate after a failure.
    """

    created_ids: list[str] = field(default_factory=list)
    error: UserServiceError | None = None
    failed_index: int | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class DeletionOutcome:
    user_id: str
    success: bool
    error: str | None = None


def _extract_user_id(payload: Any) -> str:
    if isinstance(payload, dict):
        if payload.get("id") is not None:
            return str(payload["id"])
        data = payload.get("data")
        if isinstance(data, dict) and data.get("id") is not None:
            return str(data["id"])
    raise UserServiceError(
        f"User service response carries no user id: {payload!r}",
        outcome_unknown=True,
    )


class UserProvisioningClient:
    """Creates and deletes users in the User service.

    The aiohttp session is opened in ``start`` and shared by all requests;
    each call gets its own ``ClientTimeout`` so no remote wait is unbounded.
    """

    def __init__(
        self,
        settings: UserServiceSettings,
        session: aiohttp.ClientSession | None = None,
    ):
        self.url = settings.USER_SERVICE_URL.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=settings.USER_SERVICE_TIMEOUT)
        self._session = session
        self._owns_session = session is None

    async def start(self) -> None:
        if self._session is None:
            self._session = aiohttp.ClientSession()

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise RuntimeError("UserProvisioningClient.start() was not awaited")
        return self._session

    async def create_user(self, institution_id: UUID, spec: UserSpec) -> str:
        """Create one user and return its remote id."""
        body = spec.model_dump(mode="json", exclude_none=True)
        body["institution_id"] = str(institution_id)
        try:
            async with self.session.post(
                f"{self.url}/users", json=body, timeout=self.timeout
            ) as response:
                if response.status >= 400:
                    text = await response.text()
                    raise UserServiceError(
                        f"User service returned {response.status}: {text[:200]}"
                    )
                try:
                    payload = await response.json(content_type=None)
                except ValueError as e:
                    # 2xx without a readable id: the user probably exists
                    raise UserServiceError(
                        f"Unreadable user service response: {e}",
                        outcome_unknown=True,
                    ) from e
                return _extract_user_id(payload)
        except asyncio.TimeoutError as e:
            raise UserServiceError(
                f"User creation timed out after {self.timeout.total}s",
                outcome_unknown=True,
            ) from e
        except aiohttp.ServerDisconnectedError as e:
            raise UserServiceError(
                f"User service disconnected: {e}", outcome_unknown=True
            ) from e
        except aiohttp.ClientError as e:
            raise UserServiceError(f"User service unavailable: {e}") from e

    async def create_users(
        self, institution_id: UUID, specs: list[UserSpec]
    ) -> ProvisioningResult:
        """Create users one at a time, stopping at the first failure."""
        result = ProvisioningResult()
        for index, spec in enumerate(specs):
            try:
                user_id = await self.create_user(institution_id, spec)
            except UserServiceError as e:
                logger.warning(
                    "User provisioning failed",
                    institution_id=str(institution_id),
                    index=index,
                    created=len(result.created_ids),
                    outcome_unknown=e.outcome_unknown,
                    error=str(e),
                )
                result.error = e
                result.failed_index = index
                return result
            result.created_ids.append(user_id)
        return result

    async def delete_user(self, user_id: str) -> None:
        try:
            async with self.session.delete(
                f"{self.url}/users/{user_id}", timeout=self.timeout
            ) as response:
                # Already gone counts as deleted
                if response.status >= 400 and response.status != 404:
                    text = await response.text()
                    raise UserServiceError(
                        f"User service returned {response.status}: {text[:200]}"
                    )
        except asyncio.TimeoutError as e:
            raise UserServiceError(
                f"User deletion timed out after {self.timeout.total}s",
                outcome_unknown=True,
            ) from e
        except aiohttp.ClientError as e:
            raise UserServiceError(f"User service unavailable: {e}") from e

    async def delete_users(self, user_ids: list[str]) -> list[DeletionOutcome]:
        """Best-effort deletion; every id is attempted regardless of failures."""
        results = await asyncio.gather(
            *(self.delete_user(user_id) for user_id in user_ids),
            return_exceptions=True,
        )
        outcomes = []
        for user_id, result in zip(user_ids, results):
            if isinstance(result, BaseException):
                logger.error(
                    "User deletion failed", user_id=user_id, error=str(result)
                )
                outcomes.append(
                    DeletionOutcome(user_id=user_id, success=False, error=str(result))
                )
            else:
                outcomes.append(DeletionOutcome(user_id=user_id, success=True))
        return outcomes
