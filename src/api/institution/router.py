"""Institution domain router."""

from uuid import UUID

from fastapi import APIRouter, status

from src.api.core.dependencies import CreationWorkflowDep, InstitutionStoreDep
from src.api.core.messages import APIResponse, MessageCode
from src.api.institution.schemas import (
    InstitutionCreateRequest,
    InstitutionListResponse,
    InstitutionModel,
    InstitutionResponse,
    InstitutionStatusUpdateRequest,
    InstitutionUpdateRequest,
)
from src.database.models import Institution, InstitutionStatus

router = APIRouter(
    prefix="/institutions",
    tags=["institutions"],
)


def _list_response(institutions: list[Institution]) -> InstitutionListResponse:
    return APIResponse.success_response(
        data=[InstitutionModel.model_validate(i) for i in institutions],
    )


@router.get("", response_model=InstitutionListResponse)
async def list_institutions(store: InstitutionStoreDep) -> InstitutionListResponse:
    """List active and inactive institutions."""
    return _list_response(await store.list_all())


@router.get("/active", response_model=InstitutionListResponse)
async def list_active_institutions(
    store: InstitutionStoreDep,
) -> InstitutionListResponse:
    return _list_response(await store.list_by_status(InstitutionStatus.ACTIVE))


@router.get("/inactive", response_model=InstitutionListResponse)
async def list_inactive_institutions(
    store: InstitutionStoreDep,
) -> InstitutionListResponse:
    return _list_response(await store.list_by_status(InstitutionStatus.INACTIVE))


@router.get("/deleted", response_model=InstitutionListResponse)
async def list_deleted_institutions(
    store: InstitutionStoreDep,
) -> InstitutionListResponse:
    """List soft-deleted institutions that can still be restored."""
    return _list_response(await store.list_by_status(InstitutionStatus.DELETED))


@router.post(
    "",
    response_model=InstitutionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_institution(
    institution_data: InstitutionCreateRequest,
    workflow: CreationWorkflowDep,
) -> InstitutionResponse:
    """Create an institution and provision its users in the User service."""
    institution = await workflow.create(
        institution_data.institution_attributes(), institution_data.users
    )
    return APIResponse.success_response(
        message_code=MessageCode.INSTITUTION_CREATED,
        data=InstitutionModel.model_validate(institution),
    )


@router.get("/{institution_id}", response_model=InstitutionResponse)
async def get_institution(
    institution_id: UUID, store: InstitutionStoreDep
) -> InstitutionResponse:
    institution = await store.get_by_id(institution_id)
    return APIResponse.success_response(
        data=InstitutionModel.model_validate(institution)
    )


@router.put("/{institution_id}", response_model=InstitutionResponse)
async def update_institution(
    institution_id: UUID,
    institution_data: InstitutionUpdateRequest,
    store: InstitutionStoreDep,
) -> InstitutionResponse:
    """Update descriptive attributes; status is left untouched."""
    institution = await store.update(
        institution_id, institution_data.model_dump(exclude_unset=True)
    )
    return APIResponse.success_response(
        message_code=MessageCode.INSTITUTION_UPDATED,
        data=InstitutionModel.model_validate(institution),
    )


@router.patch("/{institution_id}/status", response_model=InstitutionResponse)
async def change_institution_status(
    institution_id: UUID,
    status_data: InstitutionStatusUpdateRequest,
    store: InstitutionStoreDep,
) -> InstitutionResponse:
    """Switch between active and inactive."""
    institution = await store.change_status(
        institution_id, InstitutionStatus(status_data.status)
    )
    return APIResponse.success_response(
        message_code=MessageCode.INSTITUTION_UPDATED,
        data=InstitutionModel.model_validate(institution),
    )


@router.delete("/{institution_id}", response_model=InstitutionResponse)
async def delete_institution(
    institution_id: UUID, store: InstitutionStoreDep
) -> InstitutionResponse:
    """Soft delete; classrooms are soft-deleted with the institution."""
    institution = await store.mark_deleted(institution_id)
    return APIResponse.success_response(
        message_code=MessageCode.INSTITUTION_DELETED,
        data=InstitutionModel.model_validate(institution),
    )


@router.post("/{institution_id}/restore", response_model=InstitutionResponse)
async def restore_institution(
    institution_id: UUID, store: InstitutionStoreDep
) -> InstitutionResponse:
    institution = await store.restore(institution_id)
    return APIResponse.success_response(
        message_code=MessageCode.INSTITUTION_RESTORED,
        data=InstitutionModel.model_validate(institution),
    )
