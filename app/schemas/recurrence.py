from datetime import date
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from app.scheduling.time_algebra import parse_time, require_valid_block
from app.schemas.schedule import Weekday


class Frequency(str, Enum):
    DAILY = "Daily"
    WEEKLY = "Weekly"
    TWICE_WEEKLY = "TwiceWeekly"
    BIWEEKLY = "Biweekly"
    MONTHLY = "Monthly"

    @property
    def is_weekly(self) -> bool:
        return self in (Frequency.WEEKLY, Frequency.TWICE_WEEKLY, Frequency.BIWEEKLY)


class EndByDate(BaseModel):
    type: Literal["date"] = "date"
    value: date


class EndAfterCount(BaseModel):
    type: Literal["count"] = "count"
    value: int


EndCondition = Annotated[Union[EndByDate, EndAfterCount], Field(discriminator="type")]


class RecurrencePattern(BaseModel):
    frequency: Frequency
    interval: int = Field(default=1, ge=1)
    days_of_week: Optional[List[Weekday]] = None
    end_condition: EndCondition

    @field_validator("days_of_week", mode="before")
    @classmethod
    def normalize_days(cls, value):
        # Accept "Monday" as well as "monday"
        if isinstance(value, list):
            return [v.lower() if isinstance(v, str) else v for v in value]
        return value

    @model_validator(mode="after")
    def check_combination(self) -> "RecurrencePattern":
        if self.days_of_week is not None and not self.frequency.is_weekly:
            raise ValueError(f"days_of_week cannot be combined with {self.frequency.value} frequency")
        if self.frequency == Frequency.TWICE_WEEKLY and len(set(self.days_of_week or [])) != 2:
            raise ValueError("TwiceWeekly frequency requires exactly two days_of_week")
        return self


class Occurrence(BaseModel):
    occurrence_date: date
    start_time: str
    end_time: str
    sequence: int = 0

    @field_validator("start_time", "end_time")
    @classmethod
    def check_times(cls, value: str) -> str:
        parse_time(value)
        return value

    @model_validator(mode="after")
    def check_interval(self) -> "Occurrence":
        require_valid_block(self, "Occurrence")
        return self


class SeriesPreviewRequest(BaseModel):
    base: Occurrence
    recurrence_pattern: RecurrencePattern


class SeriesPreviewResponse(BaseModel):
    label: str
    occurrences: List[Occurrence]
