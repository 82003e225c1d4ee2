"""Classroom routes, nested under their institution."""

from uuid import UUID

from fastapi import APIRouter, status

from src.api.classroom.schemas import (
    ClassroomCreateRequest,
    ClassroomListResponse,
    ClassroomModel,
    ClassroomResponse,
    ClassroomStatusUpdateRequest,
    ClassroomUpdateRequest,
)
from src.api.core.dependencies import ClassroomServiceDep
from src.api.core.messages import APIResponse, MessageCode
from src.database.models import InstitutionStatus

router = APIRouter(
    prefix="/institutions/{institution_id}/classrooms",
    tags=["classrooms"],
)


@router.get("", response_model=ClassroomListResponse)
async def list_classrooms(
    institution_id: UUID,
    service: ClassroomServiceDep,
    include_deleted: bool = False,
) -> ClassroomListResponse:
    classrooms = await service.list_classrooms(institution_id, include_deleted)
    return APIResponse.success_response(
        data=[ClassroomModel.model_validate(c) for c in classrooms],
    )


@router.post("", response_model=ClassroomResponse, status_code=status.HTTP_201_CREATED)
async def create_classroom(
    institution_id: UUID,
    classroom_data: ClassroomCreateRequest,
    service: ClassroomServiceDep,
) -> ClassroomResponse:
    classroom = await service.create_classroom(
        institution_id,
        name=classroom_data.name,
        type=classroom_data.type,
        capacity=classroom_data.capacity,
    )
    return APIResponse.success_response(
        message_code=MessageCode.CLASSROOM_CREATED,
        data=ClassroomModel.model_validate(classroom),
    )


@router.get("/{classroom_id}", response_model=ClassroomResponse)
async def get_classroom(
    institution_id: UUID, classroom_id: UUID, service: ClassroomServiceDep
) -> ClassroomResponse:
    classroom = await service.get_classroom(institution_id, classroom_id)
    return APIResponse.success_response(data=ClassroomModel.model_validate(classroom))


@router.put("/{classroom_id}", response_model=ClassroomResponse)
async def update_classroom(
    institution_id: UUID,
    classroom_id: UUID,
    classroom_data: ClassroomUpdateRequest,
    service: ClassroomServiceDep,
) -> ClassroomResponse:
    classroom = await service.update_classroom(
        institution_id, classroom_id, classroom_data.model_dump(exclude_unset=True)
    )
    return APIResponse.success_response(
        message_code=MessageCode.CLASSROOM_UPDATED,
        data=ClassroomModel.model_validate(classroom),
    )


@router.patch("/{classroom_id}/status", response_model=ClassroomResponse)
async def change_classroom_status(
    institution_id: UUID,
    classroom_id: UUID,
    status_data: ClassroomStatusUpdateRequest,
    service: ClassroomServiceDep,
) -> ClassroomResponse:
    classroom = await service.change_status(
        institution_id, classroom_id, InstitutionStatus(status_data.status)
    )
    return APIResponse.success_response(
        message_code=MessageCode.CLASSROOM_UPDATED,
        data=ClassroomModel.model_validate(classroom),
    )


@router.delete("/{classroom_id}", response_model=ClassroomResponse)
async def delete_classroom(
    institution_id: UUID, classroom_id: UUID, service: ClassroomServiceDep
) -> ClassroomResponse:
    classroom = await service.delete_classroom(institution_id, classroom_id)
    return APIResponse.success_response(
        message_code=MessageCode.CLASSROOM_DELETED,
        data=ClassroomModel.model_validate(classroom),
    )


@router.post("/{classroom_id}/restore", response_model=ClassroomResponse)
async def restore_classroom(
    institution_id: UUID, classroom_id: UUID, service: ClassroomServiceDep
) -> ClassroomResponse:
    classroom = await service.restore_classroom(institution_id, classroom_id)
    return APIResponse.success_response(
        message_code=MessageCode.CLASSROOM_RESTORED,
        data=ClassroomModel.model_validate(classroom),
    )
