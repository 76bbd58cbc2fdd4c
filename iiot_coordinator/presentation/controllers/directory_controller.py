"""Directory maintenance and line membership endpoints."""

from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Query

from iiot_coordinator.application.dtos.directory_dto import (
    DirectoryInvalidatedDTO,
    LineMembersDTO,
)
from iiot_coordinator.application.use_cases.device_use_cases import (
    GetLineMembersUseCase,
    InvalidateDirectoryUseCase,
)

router = APIRouter(tags=["Directory"])


@router.post("/directory/invalidate", response_model=DirectoryInvalidatedDTO)
@inject
async def invalidate_directory(
    reason: Optional[str] = Query(None, description="Why the caches are cleared"),
    invalidate_directory_use_case: InvalidateDirectoryUseCase = Depends(
        Provide["invalidate_directory_use_case"]
    ),
) -> DirectoryInvalidatedDTO:
    """Drop every cached device and line entry."""
    return invalidate_directory_use_case.execute(reason)


@router.get("/lines/{line_id}/devices", response_model=LineMembersDTO)
@inject
async def get_line_devices(
    line_id: str,
    get_line_members_use_case: GetLineMembersUseCase = Depends(
        Provide["get_line_members_use_case"]
    ),
) -> LineMembersDTO:
    """Return the ordered devices of a line."""
    return await get_line_members_use_case.execute(line_id)
