from typing import Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.redis import SlotCache, get_slot_cache
from app.db.session import get_session
from app.services.appointment_service import AppointmentService
from app.services.availability_service import AvailabilityService
from app.services.blocked_time_service import BlockedTimeService
from app.services.exception_service import ExceptionService
from app.services.schedule_service import ScheduleService

async def get_schedule_service(
    session: AsyncSession = Depends(get_session),
    cache: Optional[SlotCache] = Depends(get_slot_cache),
) -> ScheduleService:
    return ScheduleService(session, cache)

async def get_availability_service(
    session: AsyncSession = Depends(get_session),
    cache: Optional[SlotCache] = Depends(get_slot_cache),
) -> AvailabilityService:
    return AvailabilityService(session, cache)

async def get_exception_service(
    session: AsyncSession = Depends(get_session),
    cache: Optional[SlotCache] = Depends(get_slot_cache),
) -> ExceptionService:
    return ExceptionService(session, cache)

async def get_blocked_time_service(
    session: AsyncSession = Depends(get_session),
    cache: Optional[SlotCache] = Depends(get_slot_cache),
) -> BlockedTimeService:
    return BlockedTimeService(session, cache)

async def get_appointment_service(
    session: AsyncSession = Depends(get_session),
    cache: Optional[SlotCache] = Depends(get_slot_cache),
) -> AppointmentService:
    return AppointmentService(session, cache)
