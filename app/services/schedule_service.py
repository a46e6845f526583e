from datetime import date, datetime, timedelta
from typing import Optional
from uuid import UUID

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import or_, select

from app.core.logger import logger
from app.core.redis import SlotCache
from app.db.models import ClinicianSchedule
from app.scheduling.weekly_schedule import (
    select_effective_schedule,
    total_available_minutes,
    validate_weekly_schedule,
    working_days,
)
from app.schemas.schedule import (
    ClinicianScheduleCreate,
    ClinicianScheduleResponse,
    ScheduleSummary,
    WeeklySchedule,
)


def to_weekly_schedule(record: ClinicianSchedule) -> WeeklySchedule:
    return WeeklySchedule.model_validate(record.weekly_schedule)


def to_response(record: ClinicianSchedule) -> ClinicianScheduleResponse:
    weekly = to_weekly_schedule(record)
    return ClinicianScheduleResponse(
        id=record.id,
        clinician_id=record.clinician_id,
        weekly_schedule=weekly,
        effective_start_date=record.effective_start_date,
        effective_end_date=record.effective_end_date,
        accept_new_clients=record.accept_new_clients,
        max_appointments_per_day=record.max_appointments_per_day,
        validation_warnings=validate_weekly_schedule(weekly),
    )


class ScheduleService:
    def __init__(self, session: AsyncSession, cache: Optional[SlotCache] = None):
        self.session = session
        self.cache = cache

    async def save_schedule(
        self,
        clinician_id: UUID,
        data: ClinicianScheduleCreate,
        force: bool = False,
    ) -> ClinicianScheduleResponse:
        # Validation is advisory in the core; here it blocks the save unless forced.
        warnings = validate_weekly_schedule(data.weekly_schedule)
        if warnings and not force:
            raise HTTPException(
                status_code=400,
                detail={
                    "message": "Schedule has validation errors",
                    "errors": {day.value: errors for day, errors in warnings.items()},
                },
            )

        # Supersede open schedules that started earlier; nothing is deleted.
        stmt = select(ClinicianSchedule).where(
            ClinicianSchedule.clinician_id == clinician_id,
            ClinicianSchedule.effective_start_date < data.effective_start_date,
            or_(
                ClinicianSchedule.effective_end_date == None,
                ClinicianSchedule.effective_end_date >= data.effective_start_date,
            ),
        )
        result = await self.session.execute(stmt)
        for previous in result.scalars().all():
            previous.effective_end_date = data.effective_start_date - timedelta(days=1)
            previous.updated_at = datetime.utcnow()
            self.session.add(previous)

        record = ClinicianSchedule(
            clinician_id=clinician_id,
            weekly_schedule=data.weekly_schedule.model_dump(mode="json"),
            effective_start_date=data.effective_start_date,
            effective_end_date=data.effective_end_date,
            accept_new_clients=data.accept_new_clients,
            max_appointments_per_day=data.max_appointments_per_day,
        )
        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)

        logger.info(
            f"Saved schedule {record.id} for clinician {clinician_id} "
            f"effective {record.effective_start_date.isoformat()}"
        )
        if self.cache:
            await self.cache.invalidate(clinician_id)

        return to_response(record)

    async def get_effective_schedule(self, clinician_id: UUID, on_date: date) -> Optional[ClinicianSchedule]:
        stmt = select(ClinicianSchedule).where(
            ClinicianSchedule.clinician_id == clinician_id,
            ClinicianSchedule.effective_start_date <= on_date,
        )
        result = await self.session.execute(stmt)
        return select_effective_schedule(result.scalars().all(), on_date)

    async def get_schedule(self, clinician_id: UUID, on_date: date) -> ClinicianScheduleResponse:
        record = await self.get_effective_schedule(clinician_id, on_date)
        if not record:
            raise HTTPException(status_code=404, detail="No schedule in effect for this date")
        return to_response(record)

    async def get_summary(self, clinician_id: UUID, on_date: date) -> ScheduleSummary:
        record = await self.get_effective_schedule(clinician_id, on_date)
        if not record:
            raise HTTPException(status_code=404, detail="No schedule in effect for this date")

        weekly = to_weekly_schedule(record)
        return ScheduleSummary(
            clinician_id=clinician_id,
            schedule_id=record.id,
            working_days=working_days(weekly),
            total_available_minutes=total_available_minutes(weekly),
            buffer_minutes=weekly.buffer_minutes,
            validation_warnings=validate_weekly_schedule(weekly),
        )
