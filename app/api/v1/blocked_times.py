from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends

from app.api.deps import get_blocked_time_service
from app.schemas.exception import BlockedTime, BlockedTimeCreate
from app.services.blocked_time_service import BlockedTimeService

router = APIRouter()

@router.post("", response_model=List[BlockedTime])
async def create_blocked_time(
    request: BlockedTimeCreate,
    service: BlockedTimeService = Depends(get_blocked_time_service)
):
    return await service.create_blocked_time(request)

@router.get("", response_model=List[BlockedTime])
async def read_blocked_times(
    clinician_id: UUID,
    service: BlockedTimeService = Depends(get_blocked_time_service)
):
    return await service.get_blocked_times(clinician_id)

@router.delete("/{blocked_time_id}")
async def delete_blocked_time(
    blocked_time_id: UUID,
    whole_series: bool = False,
    service: BlockedTimeService = Depends(get_blocked_time_service)
):
    return await service.delete_blocked_time(blocked_time_id, whole_series)
