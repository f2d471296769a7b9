from __future__ import annotations

import io
import logging
from datetime import date
from functools import wraps
from typing import Optional

from flask import Flask, jsonify, request, send_file, session

from ..common.datetime_utils import parse_hm, parse_iso_date
from ..common.validators import require_positive_id
from ..core.enums import TimeBoundary
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    PartialCompletionError,
    PersistenceError,
    ValidationError,
)
from ..container import Container
from ..users.model import Identity
from .model import Shift, SplitPlan

logger = logging.getLogger(__name__)


def shift_to_json(s: Shift) -> dict:
    return {
        "id": s.shift_id,
        "userId": s.user_id,
        "userType": s.user_type,
        "date": s.work_date.isoformat(),
        "start": s.start.format(),
        "end": s.end.format(),
        "approved": s.approved,
        "status": s.status.value,
        "approvedBy": s.approved_by,
        "approvedAt": s.approved_at.isoformat() if s.approved_at else None,
    }


def split_to_json(plan: Optional[SplitPlan], *, needs_split: bool) -> dict:
    if plan is None:
        return {"needsSplit": needs_split, "sessions": []}
    return {
        "needsSplit": needs_split,
        "sessions": [
            {"start": plan.first.start.strftime("%H:%M"), "end": plan.first.end.strftime("%H:%M")},
            {"start": plan.second.start.strftime("%H:%M"), "end": plan.second.end.strftime("%H:%M")},
        ],
        "break": {"start": plan.break_start.strftime("%H:%M"), "end": plan.break_end.strftime("%H:%M")},
    }


def _error_response(e: DomainError):
    body = {"success": False, "message": str(e)}
    if isinstance(e, PartialCompletionError):
        body.update(
            partial=True, deletedIds=e.deleted_ids, createdIds=e.created_ids, restoredIds=e.restored_ids
        )
        return jsonify(body), 500
    if isinstance(e, PersistenceError):
        return jsonify(body), 500
    if isinstance(e, AuthorizationError):
        return jsonify(body), 403
    if isinstance(e, NotFoundError):
        return jsonify(body), 404
    if isinstance(e, ConflictError) and e.conflicting is not None:
        body["conflictingSchedule"] = shift_to_json(e.conflicting)
    return jsonify(body), 400


def _parse_split(value) -> Optional[bool]:
    if value is None or value == "auto":
        return None
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes"}


def register(app: Flask, container: Container) -> None:
    lifecycle = container.shift_service

    def api_view(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Please sign in to continue."}), 401
            try:
                return view(Identity.from_session(session), *args, **kwargs)
            except DomainError as e:
                return _error_response(e)
            except Exception:
                logger.exception("Unhandled error in %s", request.path)
                return jsonify({"success": False, "message": "Internal error"}), 500

        return wrapper

    def _arg_date(name: str = "date") -> date:
        return parse_iso_date(request.args.get(name) or "")

    def _json() -> dict:
        return request.get_json(silent=True) or {}

    @app.route("/api/schedules", methods=["GET"], endpoint="api_schedules_list")
    @api_view
    def list_schedules(identity: Identity):
        user_id = require_positive_id(request.args.get("userId"), "User")
        shifts = lifecycle.list_for_day(identity, user_id=user_id, work_date=_arg_date())
        return jsonify([shift_to_json(s) for s in shifts])

    @app.route("/api/schedules", methods=["POST"], endpoint="api_schedules_create")
    @api_view
    def create_schedule(identity: Identity):
        data = _json()
        created = lifecycle.create(
            identity,
            user_id=data.get("userId"),
            work_date=parse_iso_date(data.get("date") or ""),
            start=parse_hm(data.get("start") or ""),
            end=parse_hm(data.get("end") or ""),
            user_type=data.get("userType"),
            split=_parse_split(data.get("split")),
        )
        return jsonify([shift_to_json(s) for s in created]), 201

    @app.route("/api/schedules/template", methods=["POST"], endpoint="api_schedules_from_template")
    @api_view
    def create_from_template(identity: Identity):
        data = _json()
        template = container.template_service.get_active(require_positive_id(data.get("templateId"), "Template"))
        created = lifecycle.apply_template(
            identity,
            template,
            user_id=data.get("userId"),
            work_date=parse_iso_date(data.get("date") or ""),
            user_type=data.get("userType"),
            split=_parse_split(data.get("split")),
        )
        return jsonify([shift_to_json(s) for s in created]), 201

    @app.route("/api/schedules", methods=["PUT"], endpoint="api_schedules_edit")
    @api_view
    def edit_schedule(identity: Identity):
        data = _json()
        if not data.get("id"):
            raise ValidationError("Missing schedule ID")
        updated = lifecycle.edit(
            identity,
            require_positive_id(data["id"], "Schedule"),
            start=parse_hm(data.get("start") or ""),
            end=parse_hm(data.get("end") or ""),
            user_type=data.get("userType"),
            split=_parse_split(data.get("split")),
        )
        return jsonify([shift_to_json(s) for s in updated])

    @app.route("/api/schedules/<int:shift_id>/approve", methods=["POST"], endpoint="api_schedules_approve")
    @api_view
    def approve_schedule(identity: Identity, shift_id: int):
        data = _json()
        approved = lifecycle.approve(
            identity,
            shift_id,
            start=parse_hm(data["start"]) if data.get("start") else None,
            end=parse_hm(data["end"]) if data.get("end") else None,
            split=_parse_split(data.get("split")),
        )
        return jsonify([shift_to_json(s) for s in approved])

    @app.route("/api/schedules/<int:shift_id>/reset", methods=["POST"], endpoint="api_schedules_reset")
    @api_view
    def reset_schedule(identity: Identity, shift_id: int):
        return jsonify(shift_to_json(lifecycle.reset_to_pending(identity, shift_id)))

    @app.route("/api/schedules/combine", methods=["POST"], endpoint="api_schedules_combine")
    @api_view
    def combine_schedules(identity: Identity):
        data = _json()
        combined = lifecycle.combine(
            identity,
            require_positive_id(data.get("firstId"), "First session"),
            require_positive_id(data.get("secondId"), "Second session"),
        )
        return jsonify(shift_to_json(combined))

    @app.route("/api/schedules", methods=["DELETE"], endpoint="api_schedules_delete")
    @api_view
    def delete_schedule(identity: Identity):
        if request.args.get("deleteAll") == "true":
            work_date = _arg_date()
            count = lifecycle.delete_all_for_day(
                identity, user_id=request.args.get("userId"), work_date=work_date
            )
            return jsonify(
                {"success": True, "deletedCount": count, "message": f"Deleted {count} schedules for {work_date}"}
            )

        shift_id = request.args.get("id")
        if not shift_id:
            raise ValidationError("Missing id")
        lifecycle.delete(identity, require_positive_id(shift_id, "Schedule"))
        return jsonify({"success": True})

    @app.route("/api/schedules/split-preview", methods=["GET"], endpoint="api_schedules_split_preview")
    @api_view
    def split_preview(identity: Identity):
        user_id = require_positive_id(request.args.get("userId"), "User")
        work_date = _arg_date()
        start = parse_hm(request.args.get("start") or "")
        end = parse_hm(request.args.get("end") or "")
        rng = lifecycle.validate_and_normalize_range(user_id=user_id, work_date=work_date, start=start, end=end)
        plan = lifecycle.compute_split(user_id=user_id, work_date=work_date, start=start, end=end)
        return jsonify(split_to_json(plan, needs_split=lifecycle.needs_split(rng)))

    @app.route("/api/schedules/slots", methods=["GET"], endpoint="api_schedules_slots")
    @api_view
    def disabled_slots(identity: Identity):
        try:
            boundary = TimeBoundary(request.args.get("boundary") or TimeBoundary.START.value)
        except ValueError:
            raise ValidationError("boundary must be 'start' or 'end'")
        exclude = [
            require_positive_id(x, "Schedule") for x in (request.args.get("excludeIds") or "").split(",") if x.strip()
        ]
        slots = lifecycle.disabled_slots(
            identity,
            user_id=require_positive_id(request.args.get("userId"), "User"),
            work_date=_arg_date(),
            boundary=boundary,
            exclude_ids=exclude,
        )
        return jsonify(slots)

    @app.route("/api/schedules/by-role", methods=["GET"], endpoint="api_schedules_by_role")
    @api_view
    def schedules_by_role(identity: Identity):
        roles = container.role_service.roles_for_worker((request.args.get("userTypes") or "").split(","))
        grouped = container.role_service.shifts_by_role(_arg_date(), roles)
        return jsonify({name: [shift_to_json(s) for s in shifts] for name, shifts in grouped.items()})

    @app.route("/api/schedules/weekly", methods=["GET"], endpoint="api_schedules_weekly")
    @api_view
    def weekly_board(identity: Identity):
        week_of = parse_iso_date(request.args["weekStart"]) if request.args.get("weekStart") else date.today()
        board = container.report_service.weekly_board(
            week_of, field=request.args.get("type"), keyword=request.args.get("keyword")
        )
        return jsonify(
            {"weekTitle": board.title, "weekRange": board.range_label, "dates": board.dates, "scheduleData": board.rows}
        )

    @app.route("/api/schedules/hourly", methods=["GET"], endpoint="api_schedules_hourly")
    @api_view
    def hourly_staffing(identity: Identity):
        work_date = _arg_date() if request.args.get("date") else date.today()
        staffing = container.report_service.hourly_staffing(work_date)
        return jsonify(
            {"date": staffing.date, "hourlyData": staffing.hours, "employeeSchedules": staffing.workers}
        )

    @app.route("/api/schedules/download", methods=["GET"], endpoint="api_schedules_download")
    @api_view
    def download_weekly(identity: Identity):
        if not request.args.get("weekStart"):
            raise ValidationError("Missing weekStart parameter")
        week_of = _arg_date("weekStart")
        user_ids = [
            require_positive_id(x, "User") for x in (request.args.get("userIds") or "").split(",") if x.strip()
        ]
        content = container.report_service.export_weekly_xlsx(week_of, user_ids=user_ids or None)
        return send_file(
            io.BytesIO(content),
            download_name=f"weekly_schedule_{week_of.isoformat()}.xlsx",
            as_attachment=True,
            mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )

    @app.route("/api/schedule-templates", methods=["GET"], endpoint="api_schedule_templates")
    @api_view
    def list_templates(identity: Identity):
        return jsonify(
            [
                {
                    "id": t.template_id,
                    "name": t.name,
                    "displayName": t.display_name,
                    "startTime": t.start_time.format(),
                    "endTime": t.end_time.format(),
                    "isActive": t.is_active,
                }
                for t in container.template_service.list_active()
            ]
        )
