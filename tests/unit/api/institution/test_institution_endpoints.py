"""Institution endpoint tests."""

import pytest
from fastapi import status
from httpx import AsyncClient

from src.api.core.messages import MessageCode
from src.database.models import InstitutionStatus
from tests.utils.assertions import assert_error_response, assert_success_response

MISSING_ID = "00000000-0000-0000-0000-000000000000"


def creation_payload(name: str = "North Campus", *user_names: str) -> dict:
    return {
        "name": name,
        "address": "1 College Rd",
        "email": "office@north.example.com",
        "users": [
            {"name": n, "email": f"{n.lower()}@north.example.com", "role": "teacher"}
            for n in user_names
        ],
    }


@pytest.mark.asyncio
async def test_create_institution(app, client: AsyncClient, fake_user_service):
    response = await client.post(
        "/v1/institutions", json=creation_payload("North Campus", "Ada", "Grace")
    )

    data = assert_success_response(
        response,
        MessageCode.INSTITUTION_CREATED,
        status.HTTP_201_CREATED,
        {"name": "North Campus", "status": "active", "classrooms": []},
    )
    assert data["user_ids"] == fake_user_service.created_ids
    assert len(data["user_ids"]) == 2
    assert "version" not in data

    fetched = await client.get(f"/v1/institutions/{data['id']}")
    assert_success_response(fetched, data_assertions={"user_ids": data["user_ids"]})


@pytest.mark.asyncio
async def test_create_institution_provisioning_failure(
    app, client: AsyncClient, fake_user_service
):
    fake_user_service.slow_names.add("Second")

    response = await client.post(
        "/v1/institutions", json=creation_payload("North Campus", "First", "Second")
    )

    details = assert_error_response(
        response, MessageCode.USER_PROVISIONING_FAILED, status.HTTP_502_BAD_GATEWAY
    )
    assert details["failed_user_index"] == 1
    assert details["remote_outcome_unknown"] is True
    assert details["created_user_ids"][0] in fake_user_service.delete_requests

    listed = await client.get("/v1/institutions")
    assert assert_success_response(listed) == []


@pytest.mark.asyncio
async def test_create_institution_compensation_failure(
    app, client: AsyncClient, fake_user_service
):
    fake_user_service.fail_names.add("Bob")
    fake_user_service.fail_all_deletes = True

    response = await client.post(
        "/v1/institutions", json=creation_payload("Doomed", "Ada", "Bob")
    )

    details = assert_error_response(
        response, MessageCode.COMPENSATION_FAILED, status.HTTP_502_BAD_GATEWAY
    )
    assert details["orphaned_user_ids"] == details["created_user_ids"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"address": "No name"},
        {"name": ""},
        {"name": "Bad users", "users": [{"name": "Ada", "role": "teacher"}]},
        {"name": "Bad email", "users": [{"name": "Ada", "email": "nope", "role": "x"}]},
    ],
)
async def test_create_institution_invalid_input(
    app, client: AsyncClient, fake_user_service, payload
):
    response = await client.post("/v1/institutions", json=payload)

    assert_error_response(
        response, MessageCode.INVALID_INPUT, status.HTTP_422_UNPROCESSABLE_ENTITY
    )
    assert fake_user_service.create_requests == []


@pytest.mark.asyncio
async def test_get_missing_institution(app, client: AsyncClient):
    response = await client.get(f"/v1/institutions/{MISSING_ID}")

    details = assert_error_response(
        response, MessageCode.INSTITUTION_NOT_FOUND, status.HTTP_404_NOT_FOUND
    )
    assert details["institution_id"] == MISSING_ID


@pytest.mark.asyncio
async def test_list_filters_by_status(
    app, client: AsyncClient, app_session, institution_factory
):
    active = await institution_factory.create_batch_async(
        app_session, 3, status=InstitutionStatus.ACTIVE
    )
    inactive = await institution_factory.create_async(
        app_session, status=InstitutionStatus.INACTIVE
    )
    deleted = await institution_factory.create_async(
        app_session, status=InstitutionStatus.DELETED
    )

    active_ids = {i["id"] for i in assert_success_response(
        await client.get("/v1/institutions/active")
    )}
    assert active_ids == {str(i.id) for i in active}

    inactive_data = assert_success_response(await client.get("/v1/institutions/inactive"))
    assert [i["id"] for i in inactive_data] == [str(inactive.id)]

    deleted_data = assert_success_response(await client.get("/v1/institutions/deleted"))
    assert [i["id"] for i in deleted_data] == [str(deleted.id)]

    default_ids = {i["id"] for i in assert_success_response(
        await client.get("/v1/institutions")
    )}
    assert default_ids == active_ids | {str(inactive.id)}


@pytest.mark.asyncio
async def test_update_institution(
    app, client: AsyncClient, app_session, institution_factory
):
    institution = await institution_factory.create_async(app_session)

    response = await client.put(
        f"/v1/institutions/{institution.id}",
        json={"name": "Renamed", "phone": "+1 555 0100"},
    )

    assert_success_response(
        response,
        MessageCode.INSTITUTION_UPDATED,
        data_assertions={
            "name": "Renamed",
            "phone": "+1 555 0100",
            "address": institution.address,
            "status": "active",
        },
    )


@pytest.mark.asyncio
async def test_update_missing_institution(app, client: AsyncClient):
    response = await client.put(f"/v1/institutions/{MISSING_ID}", json={"name": "X"})

    assert_error_response(
        response, MessageCode.INSTITUTION_NOT_FOUND, status.HTTP_404_NOT_FOUND
    )


@pytest.mark.asyncio
async def test_change_status(app, client: AsyncClient, app_session, institution_factory):
    institution = await institution_factory.create_async(app_session)

    response = await client.patch(
        f"/v1/institutions/{institution.id}/status", json={"status": "inactive"}
    )
    assert_success_response(
        response, MessageCode.INSTITUTION_UPDATED, data_assertions={"status": "inactive"}
    )

    rejected = await client.patch(
        f"/v1/institutions/{institution.id}/status", json={"status": "deleted"}
    )
    assert_error_response(
        rejected, MessageCode.INVALID_INPUT, status.HTTP_422_UNPROCESSABLE_ENTITY
    )


@pytest.mark.asyncio
async def test_status_change_does_not_undelete(
    app, client: AsyncClient, app_session, institution_factory
):
    institution = await institution_factory.create_async(app_session)
    url = f"/v1/institutions/{institution.id}"
    await client.delete(url)

    response = await client.patch(f"{url}/status", json={"status": "inactive"})

    details = assert_error_response(
        response, MessageCode.INVALID_STATUS_TRANSITION, status.HTTP_409_CONFLICT
    )
    assert details["current_status"] == "deleted"
    assert_success_response(
        await client.get(url), data_assertions={"status": "deleted"}
    )


@pytest.mark.asyncio
async def test_update_rejects_null_name(
    app, client: AsyncClient, app_session, institution_factory
):
    institution = await institution_factory.create_async(app_session)
    url = f"/v1/institutions/{institution.id}"

    response = await client.put(url, json={"name": None})
    assert_error_response(
        response, MessageCode.INVALID_INPUT, status.HTTP_422_UNPROCESSABLE_ENTITY
    )

    # Optional attributes can still be cleared
    cleared = await client.put(url, json={"address": None})
    assert_success_response(
        cleared,
        MessageCode.INSTITUTION_UPDATED,
        data_assertions={"address": None, "name": institution.name},
    )

@pytest.mark.asyncio
async def test_delete_and_restore(
    app, client: AsyncClient, app_session, institution_factory
):
    institution = await institution_factory.create_async(app_session)
    url = f"/v1/institutions/{institution.id}"

    never_deleted = await client.post(f"{url}/restore")
    details = assert_error_response(
        never_deleted, MessageCode.INVALID_STATUS_TRANSITION, status.HTTP_409_CONFLICT
    )
    assert details["current_status"] == "active"

    deleted = await client.delete(url)
    assert_success_response(
        deleted, MessageCode.INSTITUTION_DELETED, data_assertions={"status": "deleted"}
    )

    again = await client.delete(url)
    assert_error_response(
        again, MessageCode.INVALID_STATUS_TRANSITION, status.HTTP_409_CONFLICT
    )

    restored = await client.post(f"{url}/restore")
    assert_success_response(
        restored,
        MessageCode.INSTITUTION_RESTORED,
        data_assertions={"status": "inactive", "name": institution.name},
    )


@pytest.mark.asyncio
async def test_delete_and_restore_missing(app, client: AsyncClient):
    deleted = await client.delete(f"/v1/institutions/{MISSING_ID}")
    assert_error_response(
        deleted, MessageCode.INSTITUTION_NOT_FOUND, status.HTTP_404_NOT_FOUND
    )

    restored = await client.post(f"/v1/institutions/{MISSING_ID}/restore")
    assert_error_response(
        restored, MessageCode.INSTITUTION_NOT_FOUND, status.HTTP_404_NOT_FOUND
    )


@pytest.mark.asyncio
async def test_malformed_id_is_invalid_input(app, client: AsyncClient):
    response = await client.get("/v1/institutions/not-a-uuid")

    assert_error_response(
        response, MessageCode.INVALID_INPUT, status.HTTP_422_UNPROCESSABLE_ENTITY
    )


@pytest.mark.asyncio
async def test_unknown_route_uses_envelope(app, client: AsyncClient):
    response = await client.get("/v1/nowhere")

    assert_error_response(
        response, MessageCode.RESOURCE_NOT_FOUND, status.HTTP_404_NOT_FOUND
    )


@pytest.mark.asyncio
async def test_responses_carry_request_id(app, client: AsyncClient):
    response = await client.get("/v1/institutions")

    assert response.headers.get("X-Request-ID")
