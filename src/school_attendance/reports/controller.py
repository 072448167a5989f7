from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, request

from ..common.http import arg_date, login_required
from ..container import Container
from ..core.constants import DEFAULT_REPORT_DAYS


def register(app: Flask, container: Container) -> None:
    def _build_report():
        today = container.clock.now().date()
        start = arg_date(request.args.get("start"), "start", today - timedelta(days=DEFAULT_REPORT_DAYS))
        end = arg_date(request.args.get("end"), "end", today)
        report = container.report_service.build_attendance_report(
            start=start,
            end=end,
            class_name=request.args.get("class") or None,
            section=request.args.get("section") or None,
        )
        return start, end, report

    @app.route("/api/reports/attendance", methods=["GET"], endpoint="api_reports_attendance")
    @login_required
    def attendance_report(actor):
        start, end, report = _build_report()
        return jsonify(
            {
                "success": True,
                "start": start.strftime("%Y-%m-%d"),
                "end": end.strftime("%Y-%m-%d"),
                "rows": report.rows,
                "summary": report.summary,
            }
        )

    @app.route("/api/reports/attendance.csv", methods=["GET"], endpoint="api_reports_attendance_csv")
    @login_required
    def attendance_report_csv(actor):
        start, end, report = _build_report()
        filename = f"attendance_report_{start:%Y-%m-%d}_to_{end:%Y-%m-%d}.csv"
        return app.response_class(
            container.report_service.to_csv(report),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
