from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends

from app.api.deps import get_appointment_service
from app.core.utils import parse_date_param
from app.schemas.appointment import (
    BookedAppointment,
    RecurringAppointmentCreate,
    RecurringSeriesResponse,
)
from app.schemas.recurrence import SeriesPreviewRequest, SeriesPreviewResponse
from app.services.appointment_service import AppointmentService

router = APIRouter()

@router.post("/recurring", response_model=RecurringSeriesResponse)
async def create_recurring_series(
    request: RecurringAppointmentCreate,
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.create_recurring_series(request)

@router.post("/series-preview", response_model=SeriesPreviewResponse)
async def preview_series(
    request: SeriesPreviewRequest,
    service: AppointmentService = Depends(get_appointment_service)
):
    return service.preview_series(request)

@router.get("/{clinician_id}", response_model=List[BookedAppointment])
async def read_bookings(
    clinician_id: UUID,
    date: str, # YYYY-MM-DD
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.get_active_bookings(clinician_id, parse_date_param(date))
