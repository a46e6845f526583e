from datetime import date
from enum import Enum
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, field_validator, model_validator

from app.scheduling.time_algebra import parse_time, require_valid_block
from app.schemas.recurrence import RecurrencePattern


class AppointmentStatus(str, Enum):
    SCHEDULED = "Scheduled"
    CONFIRMED = "Confirmed"
    CHECKED_IN = "Checked In"
    IN_SESSION = "In Session"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    NO_SHOW = "No Show"
    RESCHEDULED = "Rescheduled"


NON_OCCUPYING_STATUSES = (AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW)


class AppointmentBase(BaseModel):
    clinician_id: UUID
    client_id: Optional[UUID] = None
    appointment_date: date
    start_time: str
    end_time: str
    appointment_type: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def check_times(cls, value: str) -> str:
        parse_time(value)
        return value

    @model_validator(mode="after")
    def check_interval(self) -> "AppointmentBase":
        require_valid_block(self, "Appointment")
        return self


class BookedAppointment(AppointmentBase):
    id: Optional[UUID] = None
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    is_recurring: bool = False
    parent_recurrence_id: Optional[UUID] = None

    class Config:
        from_attributes = True

    @property
    def occupies_calendar(self) -> bool:
        return self.status not in NON_OCCUPYING_STATUSES


class RecurringAppointmentCreate(AppointmentBase):
    recurrence_pattern: RecurrencePattern


class RecurringSeriesResponse(BaseModel):
    parent_recurrence_id: UUID
    label: str
    appointments: List[BookedAppointment]
