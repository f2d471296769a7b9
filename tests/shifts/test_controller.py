from __future__ import annotations

from dataclasses import replace
from datetime import date
from types import SimpleNamespace

import pytest
from flask import Flask

from src.shift_scheduler.shift_scheduler.business_day.model import BusinessDayConfig, WallClockTime
from src.shift_scheduler.shift_scheduler.core.exceptions import PersistenceError
from src.shift_scheduler.shift_scheduler.reports.service import ScheduleReportService
from src.shift_scheduler.shift_scheduler.shifts.controller import register
from src.shift_scheduler.shift_scheduler.shifts.model import NewShift, Shift
from src.shift_scheduler.shift_scheduler.shifts.service import ShiftLifecycleService
from src.shift_scheduler.shift_scheduler.templates.model import ScheduleTemplate
from src.shift_scheduler.shift_scheduler.templates.service import TemplateService
from src.shift_scheduler.shift_scheduler.users.model import Worker

D = date(2025, 3, 4)


class InMemoryShifts:
    def __init__(self):
        self.rows: dict[int, Shift] = {}
        self._next_id = 1
        self.fail_creates = False

    def list_shifts(self, *, user_id=None, work_date=None, user_type=None):
        return [
            s
            for s in self.rows.values()
            if (user_id is None or s.user_id == user_id) and (work_date is None or s.work_date == work_date)
        ]

    def list_between(self, *, start, end):
        return [s for s in self.rows.values() if start <= s.work_date <= end]

    def get_by_id(self, shift_id):
        return self.rows.get(int(shift_id))

    def create(self, new: NewShift) -> Shift:
        if self.fail_creates:
            raise PersistenceError("insert timed out")
        shift = Shift(shift_id=self._next_id, **vars(new))
        self.rows[shift.shift_id] = shift
        self._next_id += 1
        return shift

    def update(self, shift_id, changes):
        current = self.rows.get(int(shift_id))
        if not current:
            return None
        fields = {k: v for k, v in vars(changes).items() if v is not None}
        updated = replace(current, **fields)
        self.rows[current.shift_id] = updated
        return updated

    def delete(self, shift_id):
        return self.rows.pop(int(shift_id), None) is not None

    def delete_all_for_day(self, *, user_id, work_date):
        ids = [s.shift_id for s in self.list_shifts(user_id=user_id, work_date=work_date)]
        for i in ids:
            del self.rows[i]
        return len(ids)


class FakeWorkers:
    def get_by_id(self, user_id):
        return Worker(user_id=user_id, name=f"W{user_id}")

    def list_active(self):
        return [Worker(user_id=1, name="Anna", eid="E1"), Worker(user_id=2, name="Ben", eid="E2")]


class FakeBusinessDays:
    def default(self):
        return BusinessDayConfig(8, 24)

    def for_corporation(self, corporation_id):
        return self.default()

    def for_user(self, user_id):
        return self.default()


class FakeTemplates:
    def list_templates(self):
        return [
            ScheduleTemplate(
                template_id=1,
                name="opening",
                display_name="Opening",
                start_time=WallClockTime(8, 0),
                end_time=WallClockTime(12, 0),
            )
        ]

    def get_by_id(self, template_id):
        return next((t for t in self.list_templates() if t.template_id == template_id), None)


@pytest.fixture
def shifts():
    return InMemoryShifts()


@pytest.fixture
def client(shifts):
    business_days = FakeBusinessDays()
    container = SimpleNamespace(
        shift_service=ShiftLifecycleService(shifts, business_days),
        template_service=TemplateService(FakeTemplates()),
        role_service=None,
        report_service=ScheduleReportService(shifts, FakeWorkers(), business_days),
    )
    app = Flask(__name__)
    app.secret_key = "test"
    register(app, container)
    return app.test_client()


def login(client, user_id, position="employee", user_types=""):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["position"] = position
        sess["user_types"] = user_types


def test_requires_session(client):
    resp = client.get("/api/schedules?userId=1&date=2025-03-04")

    assert resp.status_code == 401


def test_create_and_list(client):
    login(client, 1)

    resp = client.post("/api/schedules", json={"userId": 1, "date": "2025-03-04", "start": "09:00", "end": "17:00"})
    assert resp.status_code == 201
    created = resp.get_json()
    assert [(s["start"], s["end"]) for s in created] == [("09:00", "12:45"), ("13:15", "17:00")]
    assert all(s["status"] == "pending" for s in created)

    listed = client.get("/api/schedules?userId=1&date=2025-03-04").get_json()
    assert len(listed) == 2


def test_validation_errors_are_400(client):
    login(client, 1)

    resp = client.post("/api/schedules", json={"userId": 1, "date": "2025-03-04", "start": "06:00", "end": "09:00"})

    assert resp.status_code == 400
    assert resp.get_json()["success"] is False
    assert "outside business hours" in resp.get_json()["message"]


def test_conflict_includes_conflicting_schedule(client, shifts):
    login(client, 100, position="admin")
    client.post("/api/schedules", json={"userId": 1, "date": "2025-03-04", "start": "10:00", "end": "14:00"})

    resp = client.post("/api/schedules", json={"userId": 1, "date": "2025-03-04", "start": "13:00", "end": "15:00"})

    assert resp.status_code == 400
    assert resp.get_json()["conflictingSchedule"]["start"] == "10:00"


def test_approve_permissions_map_to_403_and_404(client):
    login(client, 1)
    client.post("/api/schedules", json={"userId": 1, "date": "2025-03-04", "start": "09:00", "end": "12:00"})

    assert client.post("/api/schedules/1/approve", json={}).status_code == 403

    login(client, 7, user_types="manager")
    resp = client.post("/api/schedules/1/approve", json={})
    assert resp.status_code == 200
    assert resp.get_json()[0]["approvedBy"] == 7

    assert client.post("/api/schedules/99/approve", json={}).status_code == 404


def test_partial_failure_is_500_with_flag(client, shifts):
    shifts.rows[1] = Shift(
        shift_id=1, user_id=1, user_type="Barista", work_date=D, start=WallClockTime(9, 0), end=WallClockTime(18, 0)
    )
    shifts._next_id = 2
    shifts.fail_creates = True
    login(client, 100, position="admin")

    resp = client.post("/api/schedules/1/approve", json={"split": True})

    assert resp.status_code == 500
    body = resp.get_json()
    assert body["partial"] is True
    assert body["deletedIds"] == [1]
    assert body["restoredIds"] == []


def test_delete_all_for_day(client):
    login(client, 1)
    client.post("/api/schedules", json={"userId": 1, "date": "2025-03-04", "start": "09:00", "end": "11:00"})
    client.post("/api/schedules", json={"userId": 1, "date": "2025-03-04", "start": "12:00", "end": "14:00"})

    resp = client.delete("/api/schedules?userId=1&date=2025-03-04&deleteAll=true")

    assert resp.get_json()["deletedCount"] == 2


def test_split_preview_and_slots(client):
    login(client, 1)

    preview = client.get("/api/schedules/split-preview?userId=1&date=2025-03-04&start=09:00&end=17:00").get_json()
    slots = client.get("/api/schedules/slots?userId=1&date=2025-03-04&boundary=end").get_json()

    assert preview["needsSplit"] is True
    assert preview["break"] == {"start": "12:45", "end": "13:15"}
    assert slots["business_hours"] == "08:00 ~ 24:00"
    assert client.get("/api/schedules/slots?userId=1&date=2025-03-04&boundary=middle").status_code == 400


def test_template_listing_and_apply(client):
    login(client, 100, position="admin")

    templates = client.get("/api/schedule-templates").get_json()
    resp = client.post("/api/schedules/template", json={"templateId": 1, "userId": 2, "date": "2025-03-04"})

    assert templates[0]["startTime"] == "08:00"
    assert resp.status_code == 201
    assert resp.get_json()[0]["approved"] is True


def test_weekly_board_and_download(client):
    login(client, 1)
    client.post("/api/schedules", json={"userId": 1, "date": "2025-03-04", "start": "09:00", "end": "12:00"})

    board = client.get("/api/schedules/weekly?weekStart=2025-03-04").get_json()
    download = client.get("/api/schedules/download?weekStart=2025-03-04")

    assert board["weekTitle"] == "Week of Mar 2 – Mar 8"
    assert board["scheduleData"][0]["total_hours"] == "03:00"
    assert download.status_code == 200
    assert download.mimetype == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    assert client.get("/api/schedules/download").status_code == 400


def test_non_numeric_ids_are_validation_errors(client):
    login(client, 100, position="admin")

    listed = client.get("/api/schedules?userId=abc&date=2025-03-04")
    combined = client.post("/api/schedules/combine", json={"firstId": "x", "secondId": 2})
    slots = client.get("/api/schedules/slots?userId=1&date=2025-03-04&excludeIds=1,oops")

    assert listed.status_code == 400
    assert listed.get_json()["message"] == "User is invalid"
    assert combined.status_code == 400
    assert slots.status_code == 400
