from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import json_body, json_text, login_required
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..container import Container
from .model import AttendanceRecord
from .qr_payload import admission_number_from_qr


def record_to_dict(r: AttendanceRecord) -> dict:
    return {
        "id": r.record_id,
        "student_id": r.student_id,
        "session_id": r.session_id,
        "date": r.session_date.strftime("%Y-%m-%d"),
        "status": r.status.value,
        "scan_time": r.scan_time.isoformat(timespec="seconds"),
        "marked_by": r.marked_by,
        "reason": r.reason,
    }


def _optional_int(value, field_name: str):
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/mark", methods=["POST"], endpoint="api_attendance_mark")
    @login_required
    def mark_attendance(actor):
        """Scan endpoint: accepts ``admissionNumber`` or a raw ``qr_code``."""

        data = json_body()
        now = container.clock.now()

        admission_number = data.get("admissionNumber")
        if not admission_number and data.get("qr_code"):
            admission_number = admission_number_from_qr(str(data["qr_code"]), today=now.date())
        if not admission_number:
            raise ValidationError("Admission number is required")

        result = container.attendance_service.mark_scan(
            actor,
            str(admission_number),
            _optional_int(data.get("sessionId"), "sessionId"),
            now=now,
        )
        student = result.student
        return jsonify(
            {
                "success": True,
                "message": f"Attendance marked as {result.status.value.upper()}",
                "status": result.status.value,
                "session_id": result.session.session_id,
                "student": {
                    "admission_number": student.admission_number,
                    "full_name": student.full_name,
                    "class": student.class_name,
                    "section": student.section,
                },
                "record": record_to_dict(result.record),
            }
        )

    @app.route("/api/attendance/mark-excused", methods=["POST"], endpoint="api_attendance_mark_excused")
    @login_required
    def mark_excused(actor):
        data = json_body()
        record_id = _optional_int(data.get("logId"), "logId")
        if record_id is None:
            raise ValidationError("Attendance log ID is required")

        record = container.excuse_service.mark_excused(actor, record_id, json_text(data, "reason"))
        return jsonify({"success": True, "message": "Attendance marked as excused", "record": record_to_dict(record)})

    @app.route("/api/attendance/override", methods=["POST"], endpoint="api_attendance_override")
    @login_required
    def override_attendance(actor):
        data = json_body()
        student_id = data.get("studentId")
        session_id = _optional_int(data.get("sessionId"), "sessionId")
        status_s = str(data.get("status") or "").strip().lower()
        if not student_id or session_id is None or not status_s:
            raise ValidationError("Student ID, session ID, and status are required")
        try:
            status = AttendanceStatus(status_s)
        except ValueError:
            raise ValidationError(f"Unknown attendance status: {status_s}")

        record = container.attendance_service.override(
            actor,
            student_id=str(student_id),
            session_id=session_id,
            status=status,
            reason=json_text(data, "reason"),
        )
        return jsonify({"success": True, "message": "Attendance updated successfully", "record": record_to_dict(record)})
