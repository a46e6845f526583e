from datetime import date
from uuid import uuid4

import pytest

from app.services.availability_service import AvailabilityService

API = "/api/v1"
WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday"]


def schedule_payload(effective_start_date="2026-01-01", buffer_minutes=10, **day_overrides):
    days = {
        day: {
            "is_working_day": True,
            "shifts": [{"start_time": "09:00", "end_time": "17:00"}],
            "break_times": [{"start_time": "12:00", "end_time": "13:00"}],
        }
        for day in WEEKDAYS
    }
    days.update(day_overrides)
    return {
        "weekly_schedule": {"days": days, "buffer_minutes": buffer_minutes},
        "effective_start_date": effective_start_date,
    }


async def save_schedule(client, clinician_id, **kwargs):
    response = await client.put(f"{API}/schedules/{clinician_id}", json=schedule_payload(**kwargs))
    assert response.status_code == 200, response.text
    return response.json()


def slots_by_time(response):
    return {slot["time"]: slot for slot in response.json()["slots"]}


@pytest.mark.asyncio
async def test_root(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Welcome to CareSchedule API"}
    assert "X-Process-Time" in response.headers


@pytest.mark.asyncio
async def test_save_and_read_schedule(client, clinician_id):
    saved = await save_schedule(client, clinician_id)
    assert saved["clinician_id"] == str(clinician_id)
    assert saved["validation_warnings"] == {}

    response = await client.get(f"{API}/schedules/{clinician_id}", params={"on_date": "2026-03-02"})
    assert response.status_code == 200
    assert response.json()["id"] == saved["id"]

    response = await client.get(f"{API}/schedules/{clinician_id}", params={"on_date": "2025-12-31"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_schedule_summary(client, clinician_id):
    await save_schedule(client, clinician_id)
    response = await client.get(f"{API}/schedules/{clinician_id}/summary", params={"on_date": "2026-03-02"})
    assert response.status_code == 200
    summary = response.json()
    assert summary["working_days"] == WEEKDAYS
    assert summary["total_available_minutes"] == 5 * 420
    assert summary["buffer_minutes"] == 10


@pytest.mark.asyncio
async def test_invalid_schedule_needs_force(client, clinician_id):
    bad_monday = {"is_working_day": True, "shifts": [], "break_times": []}
    payload = schedule_payload(monday=bad_monday)

    response = await client.put(f"{API}/schedules/{clinician_id}", json=payload)
    assert response.status_code == 400
    assert response.json()["detail"]["errors"] == {
        "monday": ["At least one shift is required for working days"],
    }

    response = await client.put(f"{API}/schedules/{clinician_id}", params={"force": True}, json=payload)
    assert response.status_code == 200
    assert response.json()["validation_warnings"] == {
        "monday": ["At least one shift is required for working days"],
    }


@pytest.mark.asyncio
async def test_malformed_schedule_rejected(client, clinician_id):
    payload = schedule_payload(monday={
        "is_working_day": True,
        "shifts": [{"start_time": "9am", "end_time": "17:00"}],
    })
    response = await client.put(f"{API}/schedules/{clinician_id}", json=payload)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_new_schedule_supersedes_previous(client, clinician_id):
    first = await save_schedule(client, clinician_id)
    second = await save_schedule(client, clinician_id, effective_start_date="2026-03-09", buffer_minutes=0)

    response = await client.get(f"{API}/schedules/{clinician_id}", params={"on_date": "2026-03-08"})
    body = response.json()
    assert body["id"] == first["id"]
    assert body["effective_end_date"] == "2026-03-08"

    response = await client.get(f"{API}/schedules/{clinician_id}", params={"on_date": "2026-03-09"})
    assert response.json()["id"] == second["id"]


@pytest.mark.asyncio
async def test_slots(client, clinician_id):
    await save_schedule(client, clinician_id)
    response = await client.get(
        f"{API}/availability/{clinician_id}/slots", params={"date": "2026-03-02", "duration": 50},
    )
    assert response.status_code == 200
    assert response.json()["cached"] is False

    slots = slots_by_time(response)
    assert slots["11:15"]["available"] is True
    assert slots["12:00"]["reason"] == "Break time"
    assert slots["16:30"]["reason"] == "Extends past working hours"


@pytest.mark.asyncio
async def test_slots_without_schedule(client, clinician_id):
    response = await client.get(
        f"{API}/availability/{clinician_id}/slots", params={"date": "2026-03-02", "duration": 30},
    )
    assert response.status_code == 200
    slots = response.json()["slots"]
    assert len(slots) == 96
    assert all(slot["available"] for slot in slots)


@pytest.mark.asyncio
async def test_slots_on_weekend(client, clinician_id):
    await save_schedule(client, clinician_id)
    response = await client.get(
        f"{API}/availability/{clinician_id}/slots", params={"date": "2026-03-07", "duration": 30},
    )
    assert response.json()["slots"] == []


@pytest.mark.asyncio
async def test_slots_bad_parameters(client, clinician_id):
    response = await client.get(
        f"{API}/availability/{clinician_id}/slots", params={"date": "03/02/2026", "duration": 30},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid date format. Use YYYY-MM-DD"

    response = await client.get(
        f"{API}/availability/{clinician_id}/slots", params={"date": "2026-03-02", "duration": 0},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_slots_are_cached(client, clinician_id, fake_redis):
    await save_schedule(client, clinician_id)
    params = {"date": "2026-03-02", "duration": 50}

    first = await client.get(f"{API}/availability/{clinician_id}/slots", params=params)
    key = f"slots:{clinician_id}:2026-03-02:50"
    assert key in fake_redis.data
    assert fake_redis.ttls[key] == 300

    second = await client.get(f"{API}/availability/{clinician_id}/slots", params=params)
    assert second.json()["cached"] is True
    assert second.json()["slots"] == first.json()["slots"]

    # Saving a schedule drops the cached listings
    await save_schedule(client, clinician_id, effective_start_date="2026-02-01")
    assert key not in fake_redis.data


@pytest.mark.asyncio
async def test_check_availability(client, clinician_id):
    await save_schedule(client, clinician_id)
    url = f"{API}/availability/{clinician_id}/check"

    response = await client.get(url, params={"date": "2026-03-02", "time": "10:00"})
    assert response.status_code == 200
    assert response.json()["available"] is True

    response = await client.get(url, params={"date": "2026-03-02", "time": "12:30"})
    assert response.json() == {
        "available": False,
        "reason": "Break time",
        "clinician_id": str(clinician_id),
        "on_date": "2026-03-02",
        "time": "12:30",
    }

    response = await client.get(url, params={"date": "2026-03-07", "time": "10:00"})
    assert response.json()["reason"] == "Not a working day"

    response = await client.get(url, params={"date": "2026-03-02", "time": "7:00"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_exception_lifecycle(client, clinician_id):
    await save_schedule(client, clinician_id)
    slots_url = f"{API}/availability/{clinician_id}/slots"
    params = {"date": "2026-03-03", "duration": 30}

    response = await client.post(f"{API}/exceptions", json={
        "clinician_id": str(clinician_id),
        "exception_type": "Time Off",
        "start_date": "2026-03-03",
        "end_date": "2026-03-03",
        "reason": "Vacation",
    })
    assert response.status_code == 200
    exception = response.json()
    assert exception["status"] == "Requested"

    # A request alone doesn't change availability
    slots = slots_by_time(await client.get(slots_url, params=params))
    assert slots["10:00"]["available"] is True

    reviewer = str(uuid4())
    response = await client.post(f"{API}/exceptions/{exception['id']}/approve", json={"approved_by": reviewer})
    assert response.status_code == 200
    assert response.json()["status"] == "Approved"
    assert response.json()["approved_by"] == reviewer

    response = await client.get(slots_url, params=params)
    body = response.json()
    assert body["cached"] is False
    assert body["slots"]
    assert all(slot["reason"] == "Time off: Vacation" for slot in body["slots"])

    response = await client.post(
        f"{API}/exceptions/{exception['id']}/deny",
        json={"approved_by": reviewer, "denial_reason": "Changed my mind"},
    )
    assert response.status_code == 409

    response = await client.get(f"{API}/exceptions", params={"clinician_id": str(clinician_id)})
    assert [e["id"] for e in response.json()] == [exception["id"]]

    response = await client.get(
        f"{API}/exceptions", params={"clinician_id": str(clinician_id), "status": "Denied"},
    )
    assert response.json() == []


@pytest.mark.asyncio
async def test_exception_review_errors(client, clinician_id):
    response = await client.post(f"{API}/exceptions/{uuid4()}/approve", json={"approved_by": str(uuid4())})
    assert response.status_code == 404

    response = await client.post(f"{API}/exceptions", json={
        "clinician_id": str(clinician_id),
        "start_date": "2026-03-05",
        "end_date": "2026-03-03",
        "reason": "Backwards",
    })
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_blocked_time(client, clinician_id):
    await save_schedule(client, clinician_id)
    response = await client.post(f"{API}/blocked-times", json={
        "clinician_id": str(clinician_id),
        "title": "Team meeting",
        "block_type": "Meeting",
        "start_date": "2026-03-02",
        "end_date": "2026-03-02",
        "start_time": "10:00",
        "end_time": "11:00",
        "recurrence_pattern": {"frequency": "Weekly", "end_condition": {"type": "count", "value": 4}},
    })
    assert response.status_code == 200
    blocks = response.json()
    assert [b["start_date"] for b in blocks] == ["2026-03-02", "2026-03-09", "2026-03-16", "2026-03-23"]
    assert len({b["parent_block_id"] for b in blocks}) == 1

    slots_url = f"{API}/availability/{clinician_id}/slots"
    slots = slots_by_time(await client.get(slots_url, params={"date": "2026-03-09", "duration": 30}))
    assert slots["10:30"]["reason"] == "Time off: Team meeting"
    assert slots["11:15"]["available"] is True

    response = await client.delete(f"{API}/blocked-times/{blocks[1]['id']}")
    assert response.status_code == 200
    slots = slots_by_time(await client.get(slots_url, params={"date": "2026-03-09", "duration": 30}))
    assert slots["10:30"]["available"] is True

    response = await client.delete(f"{API}/blocked-times/{blocks[0]['id']}", params={"whole_series": True})
    assert response.status_code == 200
    response = await client.get(f"{API}/blocked-times", params={"clinician_id": str(clinician_id)})
    assert response.json() == []

    response = await client.delete(f"{API}/blocked-times/{blocks[0]['id']}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_recurring_series(client, clinician_id):
    await save_schedule(client, clinician_id)
    response = await client.post(f"{API}/appointments/recurring", json={
        "clinician_id": str(clinician_id),
        "client_id": str(uuid4()),
        "appointment_date": "2026-03-02",
        "start_time": "13:00",
        "end_time": "13:50",
        "appointment_type": "Therapy",
        "recurrence_pattern": {
            "frequency": "Weekly",
            "days_of_week": ["monday", "wednesday"],
            "end_condition": {"type": "count", "value": 4},
        },
    })
    assert response.status_code == 200
    series = response.json()
    assert series["label"] == "Every week on Monday, Wednesday, 4 occurrences"
    assert [a["appointment_date"] for a in series["appointments"]] == [
        "2026-03-02", "2026-03-04", "2026-03-09", "2026-03-11",
    ]

    slots = slots_by_time(await client.get(
        f"{API}/availability/{clinician_id}/slots", params={"date": "2026-03-09", "duration": 50},
    ))
    assert slots["13:50"]["reason"] == "Already booked"
    assert slots["14:00"]["available"] is True

    response = await client.get(f"{API}/appointments/{clinician_id}", params={"date": "2026-03-04"})
    assert len(response.json()) == 1


@pytest.mark.asyncio
async def test_recurring_series_errors(client, clinician_id):
    payload = {
        "clinician_id": str(clinician_id),
        "appointment_date": "2026-03-02",
        "start_time": "13:00",
        "end_time": "13:50",
        "recurrence_pattern": {"frequency": "Daily", "end_condition": {"type": "count", "value": 1001}},
    }
    response = await client.post(f"{API}/appointments/recurring", json=payload)
    assert response.status_code == 400

    payload["recurrence_pattern"] = {
        "frequency": "Monthly",
        "days_of_week": ["monday"],
        "end_condition": {"type": "count", "value": 3},
    }
    response = await client.post(f"{API}/appointments/recurring", json=payload)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_series_preview(client):
    response = await client.post(f"{API}/appointments/series-preview", json={
        "base": {"occurrence_date": "2026-01-31", "start_time": "09:00", "end_time": "10:00"},
        "recurrence_pattern": {"frequency": "Monthly", "end_condition": {"type": "date", "value": "2026-04-30"}},
    })
    assert response.status_code == 200
    body = response.json()
    assert body["label"] == "Every month until Apr 30, 2026"
    assert [o["occurrence_date"] for o in body["occurrences"]] == [
        "2026-01-31", "2026-02-28", "2026-03-31", "2026-04-30",
    ]

    response = await client.post(f"{API}/appointments/series-preview", json={
        "base": {"occurrence_date": "2026-03-02", "start_time": "09:00", "end_time": "10:00"},
        "recurrence_pattern": {"frequency": "Daily", "end_condition": {"type": "date", "value": "2026-03-01"}},
    })
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_slot_cache_failure_is_a_miss(session, broken_slot_cache, clinician_id):
    service = AvailabilityService(session, broken_slot_cache)
    response = await service.get_slots(clinician_id, date(2026, 3, 2), 30)
    assert response.cached is False
    assert len(response.slots) == 96


@pytest.mark.asyncio
async def test_inverted_time_ranges_rejected(client, clinician_id):
    await save_schedule(client, clinician_id)

    response = await client.post(f"{API}/blocked-times", json={
        "clinician_id": str(clinician_id),
        "title": "Backwards",
        "start_date": "2026-03-02",
        "end_date": "2026-03-02",
        "start_time": "14:00",
        "end_time": "13:00",
    })
    assert response.status_code == 422

    response = await client.post(f"{API}/exceptions", json={
        "clinician_id": str(clinician_id),
        "start_date": "2026-03-02",
        "end_date": "2026-03-02",
        "all_day": False,
        "start_time": "15:00",
        "end_time": "14:00",
        "reason": "Backwards",
    })
    assert response.status_code == 422

    response = await client.post(f"{API}/appointments/recurring", json={
        "clinician_id": str(clinician_id),
        "appointment_date": "2026-03-02",
        "start_time": "10:00",
        "end_time": "09:00",
        "recurrence_pattern": {"frequency": "Weekly", "end_condition": {"type": "count", "value": 3}},
    })
    assert response.status_code == 422

    response = await client.post(f"{API}/appointments/series-preview", json={
        "base": {"occurrence_date": "2026-03-02", "start_time": "10:00", "end_time": "09:00"},
        "recurrence_pattern": {"frequency": "Daily", "end_condition": {"type": "count", "value": 2}},
    })
    assert response.status_code == 422

    # Nothing was stored, so listings for the day still work
    response = await client.get(
        f"{API}/availability/{clinician_id}/slots", params={"date": "2026-03-02", "duration": 30},
    )
    assert response.status_code == 200
    assert slots_by_time(response)["10:00"]["available"] is True


@pytest.mark.asyncio
async def test_denial_requires_reason(client, clinician_id):
    response = await client.post(f"{API}/exceptions", json={
        "clinician_id": str(clinician_id),
        "start_date": "2026-03-03",
        "end_date": "2026-03-03",
        "reason": "Vacation",
    })
    exception_id = response.json()["id"]

    response = await client.post(
        f"{API}/exceptions/{exception_id}/deny",
        json={"approved_by": str(uuid4()), "denial_reason": ""},
    )
    assert response.status_code == 422

    response = await client.get(f"{API}/exceptions", params={"clinician_id": str(clinician_id)})
    assert response.json()[0]["status"] == "Requested"


@pytest.mark.asyncio
async def test_check_without_schedule_honours_time_off(client, clinician_id):
    url = f"{API}/availability/{clinician_id}/check"
    response = await client.get(url, params={"date": "2026-03-03", "time": "10:00"})
    assert response.json()["available"] is True

    response = await client.post(f"{API}/exceptions", json={
        "clinician_id": str(clinician_id),
        "start_date": "2026-03-03",
        "end_date": "2026-03-03",
        "reason": "Vacation",
    })
    exception_id = response.json()["id"]
    await client.post(f"{API}/exceptions/{exception_id}/approve", json={"approved_by": str(uuid4())})

    response = await client.get(url, params={"date": "2026-03-03", "time": "10:00"})
    body = response.json()
    assert body["available"] is False
    assert body["reason"] == "Time off: Vacation"

    response = await client.get(url, params={"date": "2026-03-04", "time": "10:00"})
    assert response.json()["available"] is True
