"""In-process stand-in for the external User service."""

import asyncio
from uuid import uuid4

from aiohttp import web


class FakeUserService:
    """aiohttp app implementing ``POST /users`` and ``DELETE /users/{id}``.

    Behaviour is steered per user name (creation) or per user id (deletion):
    ``fail_names`` answer 500, ``slow_names`` sleep ``slow_seconds`` before
    creating the user, ``fail_delete_ids`` and users named in
    ``fail_delete_names`` answer 500 on deletion.
    """

    def __init__(self):
        self.users: dict[str, dict] = {}
        self.create_requests: list[dict] = []
        self.delete_requests: list[str] = []
        self.fail_names: set[str] = set()
        self.slow_names: set[str] = set()
        self.slow_seconds: float = 1.0
        self.fail_delete_ids: set[str] = set()
        self.fail_delete_names: set[str] = set()
        self.fail_all_deletes = False
        self.wrap_response = False

        self.app = web.Application()
        self.app.router.add_post("/users", self.create_user)
        self.app.router.add_delete("/users/{user_id}", self.delete_user)

    @property
    def created_ids(self) -> list[str]:
        return list(self.users)

    async def create_user(self, request: web.Request) -> web.Response:
        body = await request.json()
        self.create_requests.append(body)
        name = body.get("name")

        if name in self.fail_names:
            return web.json_response({"error": "boom"}, status=500)
        if name in self.slow_names:
            await asyncio.sleep(self.slow_seconds)

        user_id = uuid4().hex
        self.users[user_id] = body
        payload = {"id": user_id, **body}
        if self.wrap_response:
            payload = {"success": True, "data": payload}
        return web.json_response(payload, status=201)

    async def delete_user(self, request: web.Request) -> web.Response:
        user_id = request.match_info["user_id"]
        self.delete_requests.append(user_id)

        name = self.users.get(user_id, {}).get("name")
        if (
            self.fail_all_deletes
            or user_id in self.fail_delete_ids
            or name in self.fail_delete_names
        ):
            return web.json_response({"error": "cannot delete"}, status=500)
        if self.users.pop(user_id, None) is None:
            return web.json_response({"error": "not found"}, status=404)
        return web.Response(status=204)
