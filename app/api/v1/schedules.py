from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends

from app.api.deps import get_schedule_service
from app.core.utils import parse_date_param
from app.schemas.schedule import (
    ClinicianScheduleCreate,
    ClinicianScheduleResponse,
    ScheduleSummary,
)
from app.services.schedule_service import ScheduleService

router = APIRouter()

def resolve_on_date(on_date: Optional[str]) -> date:
    return parse_date_param(on_date) if on_date else date.today()

@router.put("/{clinician_id}", response_model=ClinicianScheduleResponse)
async def save_schedule(
    clinician_id: UUID,
    request: ClinicianScheduleCreate,
    force: bool = False,
    service: ScheduleService = Depends(get_schedule_service)
):
    return await service.save_schedule(clinician_id, request, force=force)

@router.get("/{clinician_id}", response_model=ClinicianScheduleResponse)
async def read_schedule(
    clinician_id: UUID,
    on_date: Optional[str] = None, # YYYY-MM-DD, defaults to today
    service: ScheduleService = Depends(get_schedule_service)
):
    return await service.get_schedule(clinician_id, resolve_on_date(on_date))

@router.get("/{clinician_id}/summary", response_model=ScheduleSummary)
async def read_schedule_summary(
    clinician_id: UUID,
    on_date: Optional[str] = None,
    service: ScheduleService = Depends(get_schedule_service)
):
    return await service.get_summary(clinician_id, resolve_on_date(on_date))
