from datetime import date
from enum import Enum
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from app.scheduling.time_algebra import parse_time


class Weekday(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def from_date(cls, value: date) -> "Weekday":
        # date.weekday(): Monday == 0, matching declaration order
        return list(cls)[value.weekday()]

    @property
    def index(self) -> int:
        return list(Weekday).index(self)

    @property
    def label(self) -> str:
        return self.value.capitalize()


class TimeBlock(BaseModel):
    """A start/end pair of HH:MM times.

    Inverted or empty blocks are accepted here so that schedule validation can
    report them; the scheduling core rejects them when it consumes a block.
    """
    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def check_format(cls, value: str) -> str:
        parse_time(value)
        return value


class DaySchedule(BaseModel):
    is_working_day: bool = False
    shifts: List[TimeBlock] = []
    break_times: List[TimeBlock] = []


class WeeklySchedule(BaseModel):
    days: Dict[Weekday, DaySchedule] = {}
    buffer_minutes: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def fill_missing_days(self) -> "WeeklySchedule":
        for weekday in Weekday:
            if weekday not in self.days:
                self.days[weekday] = DaySchedule(is_working_day=False)
        return self

    def day(self, weekday: Weekday) -> DaySchedule:
        return self.days[weekday]

    def for_date(self, value: date) -> DaySchedule:
        return self.days[Weekday.from_date(value)]


class ClinicianScheduleBase(BaseModel):
    weekly_schedule: WeeklySchedule
    effective_start_date: date
    effective_end_date: Optional[date] = None
    accept_new_clients: bool = True
    max_appointments_per_day: Optional[int] = Field(default=None, ge=1)

    @model_validator(mode="after")
    def check_effective_range(self):
        if self.effective_end_date and self.effective_end_date < self.effective_start_date:
            raise ValueError("effective_end_date must not be before effective_start_date")
        return self


class ClinicianScheduleCreate(ClinicianScheduleBase):
    pass


class ClinicianScheduleResponse(ClinicianScheduleBase):
    id: UUID
    clinician_id: UUID
    validation_warnings: Dict[Weekday, List[str]] = {}


class ScheduleSummary(BaseModel):
    clinician_id: UUID
    schedule_id: Optional[UUID] = None
    working_days: List[Weekday]
    total_available_minutes: int
    buffer_minutes: int
    validation_warnings: Dict[Weekday, List[str]] = {}
