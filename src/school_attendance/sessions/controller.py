from __future__ import annotations

from flask import Flask, jsonify, request

from ..attendance.controller import record_to_dict
from ..audit.model import AuditEntry
from ..common.http import arg_date, arg_time, json_body, json_text, login_required
from ..core.enums import SessionStatus
from ..core.exceptions import ValidationError
from ..container import Container
from .model import AttendanceSession


def session_to_dict(s: AttendanceSession) -> dict:
    return {
        "id": s.session_id,
        "date": s.session_date.strftime("%Y-%m-%d"),
        "start_time": s.start_time.strftime("%H:%M"),
        "end_time": s.end_time.strftime("%H:%M"),
        "status": s.status.value,
        "scope": s.scope.value,
        "class": s.class_name,
        "section": s.section,
        "created_by": s.created_by,
    }


def audit_to_dict(e: AuditEntry) -> dict:
    return {
        "action": e.action.value,
        "student_id": e.student_id,
        "session_id": e.session_id,
        "previous_status": e.previous_status,
        "new_status": e.new_status,
        "performed_by": e.performed_by,
        "reason": e.reason,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/sessions", methods=["POST"], endpoint="api_sessions_create")
    @login_required
    def create_session(actor):
        data = json_body()
        today = container.clock.now().date()

        status_s = str(data.get("status") or SessionStatus.ACTIVE.value).strip().lower()
        try:
            status = SessionStatus(status_s)
        except ValueError:
            raise ValidationError(f"Unknown session status: {status_s}")

        session = container.session_service.create(
            actor,
            session_date=arg_date(data.get("date"), "date", today),
            start_time=arg_time(data.get("start_time"), "start_time"),
            end_time=arg_time(data.get("end_time"), "end_time"),
            status=status,
            class_name=json_text(data, "class"),
            section=json_text(data, "section"),
        )
        return jsonify({"success": True, "session": session_to_dict(session)}), 201

    @app.route("/api/sessions", methods=["GET"], endpoint="api_sessions_list")
    @login_required
    def list_sessions(actor):
        today = container.clock.now().date()
        day = arg_date(request.args.get("date"), "date", today)
        sessions = container.session_service.list_for_date(day)
        return jsonify({"success": True, "sessions": [session_to_dict(s) for s in sessions]})

    @app.route("/api/sessions/<int:session_id>", methods=["GET"], endpoint="api_sessions_detail")
    @login_required
    def session_detail(actor, session_id: int):
        session = container.session_service.get(session_id)
        return jsonify({"success": True, "session": session_to_dict(session)})

    @app.route("/api/sessions/<int:session_id>/activate", methods=["POST"], endpoint="api_sessions_activate")
    @login_required
    def activate_session(actor, session_id: int):
        session = container.session_service.activate(actor, session_id)
        return jsonify({"success": True, "session": session_to_dict(session)})

    @app.route("/api/sessions/<int:session_id>/complete", methods=["POST"], endpoint="api_sessions_complete")
    @login_required
    def complete_session(actor, session_id: int):
        report = container.session_service.force_complete(actor, session_id)
        return jsonify({"success": True, **report.as_dict()})

    @app.route("/api/sessions/<int:session_id>/summary", methods=["GET"], endpoint="api_sessions_summary")
    @login_required
    def session_summary(actor, session_id: int):
        return jsonify({"success": True, "summary": container.session_service.summary(session_id)})

    @app.route("/api/sessions/<int:session_id>/records", methods=["GET"], endpoint="api_sessions_records")
    @login_required
    def session_records(actor, session_id: int):
        session = container.session_service.get(session_id)
        records = container.attendance_service.list_for_session(session.session_id)
        return jsonify(
            {"success": True, "session": session_to_dict(session), "records": [record_to_dict(r) for r in records]}
        )

    @app.route("/api/sessions/<int:session_id>/audit", methods=["GET"], endpoint="api_sessions_audit")
    @login_required
    def session_audit(actor, session_id: int):
        session = container.session_service.get(session_id)
        entries = container.audit_trail.list_for_session(actor, session.session_id)
        return jsonify({"success": True, "entries": [audit_to_dict(e) for e in entries]})
