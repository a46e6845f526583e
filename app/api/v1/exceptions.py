from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends

from app.api.deps import get_exception_service
from app.schemas.exception import (
    ExceptionApproval,
    ExceptionDenial,
    ExceptionStatus,
    ScheduleException,
    ScheduleExceptionCreate,
)
from app.services.exception_service import ExceptionService

router = APIRouter()

@router.post("", response_model=ScheduleException)
async def create_exception(
    request: ScheduleExceptionCreate,
    service: ExceptionService = Depends(get_exception_service)
):
    return await service.create_exception(request)

@router.get("", response_model=List[ScheduleException])
async def read_exceptions(
    clinician_id: UUID,
    status: Optional[ExceptionStatus] = None,
    service: ExceptionService = Depends(get_exception_service)
):
    return await service.get_exceptions(clinician_id, status)

@router.post("/{exception_id}/approve", response_model=ScheduleException)
async def approve_exception(
    exception_id: UUID,
    request: ExceptionApproval,
    service: ExceptionService = Depends(get_exception_service)
):
    return await service.approve(exception_id, request)

@router.post("/{exception_id}/deny", response_model=ScheduleException)
async def deny_exception(
    exception_id: UUID,
    request: ExceptionDenial,
    service: ExceptionService = Depends(get_exception_service)
):
    return await service.deny(exception_id, request)
