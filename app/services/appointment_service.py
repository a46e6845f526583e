from datetime import date
from typing import List, Optional
from uuid import UUID, uuid4

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import settings
from app.core.logger import logger
from app.core.redis import SlotCache
from app.db.models import Appointment
from app.scheduling.errors import SchedulingError
from app.scheduling.recurrence import describe_pattern, expand_appointment_series, generate_series
from app.schemas.appointment import (
    NON_OCCUPYING_STATUSES,
    BookedAppointment,
    RecurringAppointmentCreate,
    RecurringSeriesResponse,
)
from app.schemas.recurrence import SeriesPreviewRequest, SeriesPreviewResponse

class AppointmentService:
    def __init__(self, session: AsyncSession, cache: Optional[SlotCache] = None):
        self.session = session
        self.cache = cache

    async def get_active_bookings(self, clinician_id: UUID, on_date: date) -> List[BookedAppointment]:
        """Appointments occupying the calendar: everything but Cancelled / No Show."""
        stmt = select(Appointment).where(
            Appointment.clinician_id == clinician_id,
            Appointment.appointment_date == on_date,
            Appointment.status.not_in([s.value for s in NON_OCCUPYING_STATUSES]),
        ).order_by(Appointment.start_time)
        result = await self.session.execute(stmt)
        return [BookedAppointment.model_validate(a) for a in result.scalars().all()]

    async def create_recurring_series(self, data: RecurringAppointmentCreate) -> RecurringSeriesResponse:
        parent_recurrence_id = uuid4()
        try:
            occurrences = expand_appointment_series(
                data, parent_recurrence_id, settings.MAX_SERIES_OCCURRENCES
            )
        except SchedulingError as e:
            raise HTTPException(status_code=400, detail=str(e))

        records = []
        for occurrence in occurrences:
            record = Appointment(
                **occurrence.model_dump(exclude={"id", "status"}),
                status=occurrence.status.value,
            )
            self.session.add(record)
            records.append(record)
        await self.session.commit()
        for record in records:
            await self.session.refresh(record)

        logger.info(
            f"Materialized recurring series {parent_recurrence_id} "
            f"({len(records)} appointments) for clinician {data.clinician_id}"
        )
        if self.cache:
            await self.cache.invalidate(data.clinician_id)

        return RecurringSeriesResponse(
            parent_recurrence_id=parent_recurrence_id,
            label=describe_pattern(data.recurrence_pattern),
            appointments=[BookedAppointment.model_validate(r) for r in records],
        )

    def preview_series(self, request: SeriesPreviewRequest) -> SeriesPreviewResponse:
        try:
            occurrences = generate_series(
                request.base, request.recurrence_pattern, settings.MAX_SERIES_OCCURRENCES
            )
        except SchedulingError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return SeriesPreviewResponse(
            label=describe_pattern(request.recurrence_pattern),
            occurrences=occurrences,
        )
