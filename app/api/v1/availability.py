from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_availability_service
from app.core.utils import parse_date_param, parse_time_param
from app.schemas.slot import AvailabilityCheckResponse, SlotsResponse
from app.services.availability_service import AvailabilityService

router = APIRouter()

@router.get("/{clinician_id}/slots", response_model=SlotsResponse)
async def read_slots(
    clinician_id: UUID,
    date: str, # YYYY-MM-DD
    duration: int = Query(60, description="Appointment length in minutes"),
    service: AvailabilityService = Depends(get_availability_service)
):
    return await service.get_slots(clinician_id, parse_date_param(date), duration)

@router.get("/{clinician_id}/check", response_model=AvailabilityCheckResponse)
async def check_availability(
    clinician_id: UUID,
    date: str,
    time: str, # HH:MM
    service: AvailabilityService = Depends(get_availability_service)
):
    return await service.check(clinician_id, parse_date_param(date), parse_time_param(time))
