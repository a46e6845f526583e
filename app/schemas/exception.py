from datetime import date, datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from app.scheduling.time_algebra import parse_time
from app.schemas.recurrence import RecurrencePattern


class ExceptionType(str, Enum):
    TIME_OFF = "Time Off"
    HOLIDAY = "Holiday"
    CONFERENCE = "Conference"
    TRAINING = "Training"
    MODIFIED_HOURS = "Modified Hours"
    EMERGENCY = "Emergency"
    OTHER = "Other"


class ExceptionStatus(str, Enum):
    REQUESTED = "Requested"
    APPROVED = "Approved"
    DENIED = "Denied"


class BlockType(str, Enum):
    PTO = "PTO"
    VACATION = "Vacation"
    SICK_LEAVE = "Sick Leave"
    MEETING = "Meeting"
    LUNCH = "Lunch"
    TRAINING = "Training"
    CONFERENCE = "Conference"
    PERSONAL = "Personal"
    OTHER = "Other"


def _check_optional_time(value: Optional[str]) -> Optional[str]:
    if value is not None:
        parse_time(value)
    return value


def _check_window(start_time: Optional[str], end_time: Optional[str], label: str):
    # Closed window: start == end covers a single minute
    if start_time and end_time and parse_time(end_time) < parse_time(start_time):
        raise ValueError(f"{label} {start_time}-{end_time}: end time must not be before start time")


class DateRangeMixin(BaseModel):
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def check_date_range(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class ScheduleExceptionBase(DateRangeMixin):
    clinician_id: UUID
    exception_type: ExceptionType = ExceptionType.TIME_OFF
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    all_day: bool = True
    reason: str
    notes: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def check_times(cls, value: Optional[str]) -> Optional[str]:
        return _check_optional_time(value)

    @model_validator(mode="after")
    def check_window(self) -> "ScheduleExceptionBase":
        _check_window(self.start_time, self.end_time, "Schedule exception")
        return self


class ScheduleExceptionCreate(ScheduleExceptionBase):
    pass


class ScheduleException(ScheduleExceptionBase):
    id: Optional[UUID] = None
    status: ExceptionStatus = ExceptionStatus.REQUESTED
    approved_by: Optional[UUID] = None
    approval_date: Optional[datetime] = None
    denial_reason: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ExceptionApproval(BaseModel):
    approved_by: UUID


class ExceptionDenial(BaseModel):
    approved_by: UUID
    denial_reason: str = Field(min_length=1)


class BlockedTimeBase(DateRangeMixin):
    clinician_id: UUID
    title: str
    block_type: BlockType = BlockType.OTHER
    start_time: str
    end_time: str
    notes: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def check_times(cls, value: str) -> str:
        parse_time(value)
        return value

    @model_validator(mode="after")
    def check_window(self) -> "BlockedTimeBase":
        _check_window(self.start_time, self.end_time, "Blocked time")
        return self


class BlockedTimeCreate(BlockedTimeBase):
    recurrence_pattern: Optional[RecurrencePattern] = None


class BlockedTime(BlockedTimeBase):
    id: Optional[UUID] = None
    is_recurring: bool = False
    recurrence_pattern: Optional[RecurrencePattern] = None
    parent_block_id: Optional[UUID] = None
    created_by: Optional[UUID] = None

    class Config:
        from_attributes = True
