from datetime import date, datetime

from fastapi import HTTPException

from app.scheduling.errors import MalformedTimeError
from app.scheduling.time_algebra import parse_time

def parse_date_param(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date format. Use YYYY-MM-DD")

def parse_time_param(value: str) -> str:
    try:
        parse_time(value)
    except MalformedTimeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return value
