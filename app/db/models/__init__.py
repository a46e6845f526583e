from sqlmodel import SQLModel
from .clinician_schedule import ClinicianSchedule
from .schedule_exception import ScheduleExceptionRecord
from .blocked_time import BlockedTimeRecord
from .appointment import Appointment

__all__ = [
    "SQLModel",
    "ClinicianSchedule",
    "ScheduleExceptionRecord",
    "BlockedTimeRecord",
    "Appointment",
]
