from datetime import date
from typing import List, Optional, Tuple
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import settings
from app.core.logger import logger
from app.core.redis import SlotCache
from app.db.models import BlockedTimeRecord, ScheduleExceptionRecord
from app.scheduling.availability import find_time_off, is_available
from app.scheduling.errors import SchedulingError
from app.scheduling.slots import generate_slots
from app.scheduling.time_algebra import parse_time
from app.schemas.appointment import BookedAppointment
from app.schemas.exception import BlockedTime, ExceptionStatus, ScheduleException
from app.schemas.schedule import WeeklySchedule
from app.schemas.slot import AvailabilityCheckResponse, AvailabilityResult, SlotsResponse
from app.services.appointment_service import AppointmentService
from app.services.schedule_service import ScheduleService, to_weekly_schedule

Snapshot = Tuple[Optional[WeeklySchedule], List[ScheduleException], List[BlockedTime], List[BookedAppointment]]

class AvailabilityService:
    """Loads a consistent snapshot for one clinician/date and hands it to the scheduling core."""

    def __init__(self, session: AsyncSession, cache: Optional[SlotCache] = None):
        self.session = session
        self.cache = cache

    async def load_snapshot(self, clinician_id: UUID, on_date: date) -> Snapshot:
        record = await ScheduleService(self.session).get_effective_schedule(clinician_id, on_date)
        schedule = to_weekly_schedule(record) if record else None

        stmt = select(ScheduleExceptionRecord).where(
            ScheduleExceptionRecord.clinician_id == clinician_id,
            ScheduleExceptionRecord.status == ExceptionStatus.APPROVED.value,
            ScheduleExceptionRecord.start_date <= on_date,
            ScheduleExceptionRecord.end_date >= on_date,
        )
        result = await self.session.execute(stmt)
        exceptions = [ScheduleException.model_validate(r) for r in result.scalars().all()]

        stmt = select(BlockedTimeRecord).where(
            BlockedTimeRecord.clinician_id == clinician_id,
            BlockedTimeRecord.start_date <= on_date,
            BlockedTimeRecord.end_date >= on_date,
        )
        result = await self.session.execute(stmt)
        blocked_times = [BlockedTime.model_validate(r) for r in result.scalars().all()]

        bookings = await AppointmentService(self.session).get_active_bookings(clinician_id, on_date)
        return schedule, exceptions, blocked_times, bookings

    async def get_slots(self, clinician_id: UUID, on_date: date, duration_minutes: int) -> SlotsResponse:
        if self.cache:
            cached = await self.cache.get_slots(clinician_id, on_date, duration_minutes)
            if cached is not None:
                logger.info(f"Slot cache hit for {clinician_id} on {on_date.isoformat()} ({duration_minutes} min)")
                return SlotsResponse(
                    clinician_id=clinician_id,
                    on_date=on_date,
                    duration_minutes=duration_minutes,
                    cached=True,
                    slots=cached,
                )

        schedule, exceptions, blocked_times, bookings = await self.load_snapshot(clinician_id, on_date)
        if schedule is None:
            logger.info(f"No schedule for clinician {clinician_id} on {on_date.isoformat()}, all slots open")

        try:
            slots = generate_slots(
                clinician_id,
                on_date,
                duration_minutes,
                schedule,
                exceptions=exceptions,
                bookings=bookings,
                blocked_times=blocked_times,
            )
        except SchedulingError as e:
            raise HTTPException(status_code=400, detail=str(e))

        if self.cache:
            await self.cache.set_slots(
                clinician_id, on_date, duration_minutes, slots, settings.SLOT_CACHE_TTL_SECONDS
            )

        return SlotsResponse(
            clinician_id=clinician_id,
            on_date=on_date,
            duration_minutes=duration_minutes,
            slots=slots,
        )

    async def check(self, clinician_id: UUID, on_date: date, time: str) -> AvailabilityCheckResponse:
        schedule, exceptions, blocked_times, _ = await self.load_snapshot(clinician_id, on_date)

        try:
            if schedule is None:
                # Unconfigured providers are open except for approved time off
                reason = find_time_off(on_date, parse_time(time), exceptions, blocked_times)
                result = AvailabilityResult(available=reason is None, reason=reason)
            else:
                result = is_available(on_date, time, schedule, exceptions, blocked_times)
        except SchedulingError as e:
            raise HTTPException(status_code=400, detail=str(e))

        return AvailabilityCheckResponse(
            clinician_id=clinician_id,
            on_date=on_date,
            time=time,
            available=result.available,
            reason=result.reason,
        )
