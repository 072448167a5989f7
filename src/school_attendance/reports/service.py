from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..attendance.repository import AttendanceLedger
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError

CSV_FIELDS = [
    "student_name",
    "admission_number",
    "class",
    "section",
    "date",
    "start_time",
    "end_time",
    "status",
    "scan_time",
    "marked_by",
    "reason",
]


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]


class AttendanceReportService:
    def __init__(self, ledger: AttendanceLedger):
        self._ledger = ledger

    def build_attendance_report(
        self,
        *,
        start: date,
        end: date,
        class_name: Optional[str] = None,
        section: Optional[str] = None,
    ) -> ReportData:
        if start > end:
            raise ValidationError("Start date must not be after end date")

        query_rows = self._ledger.get_report_rows(start_date=start, end_date=end, class_name=class_name, section=section)

        summary_map: dict[str, dict] = {}
        out_rows: list[dict] = []

        for r in query_rows:
            out_rows.append(
                {
                    "student_name": r.full_name,
                    "admission_number": r.student_id,
                    "class": r.class_name,
                    "section": r.section,
                    "date": r.session_date.strftime("%Y-%m-%d"),
                    "start_time": r.start_time.strftime("%H:%M"),
                    "end_time": r.end_time.strftime("%H:%M"),
                    "status": r.status.value.capitalize(),
                    "scan_time": r.scan_time.strftime("%Y-%m-%d %H:%M:%S"),
                    "marked_by": r.marked_by,
                    "reason": r.reason or "",
                }
            )

            s = summary_map.get(r.student_id)
            if not s:
                s = {
                    "admission_number": r.student_id,
                    "student_name": r.full_name,
                    "class": r.class_name,
                    "section": r.section,
                    **{status.value: 0 for status in AttendanceStatus},
                }
                summary_map[r.student_id] = s
            s[r.status.value] += 1

        summary = []
        for s in summary_map.values():
            total = sum(s[status.value] for status in AttendanceStatus)
            attended = s[AttendanceStatus.PRESENT.value] + s[AttendanceStatus.LATE.value]
            s["total"] = total
            s["attendance_rate"] = round(attended * 100.0 / total, 1) if total else 0.0
            summary.append(s)

        summary.sort(key=lambda x: x["admission_number"])
        return ReportData(rows=out_rows, summary=summary)

    @staticmethod
    def to_csv(report: ReportData) -> bytes:
        """CSV bytes with a UTF-8 BOM so spreadsheet apps detect the encoding."""

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for row in report.rows:
            writer.writerow(row)
        return out.getvalue().encode("utf-8-sig")
