"""School Attendance package.

This package is organized by feature modules (sessions, attendance,
reconciliation, reports, ...) with a thin Flask controller layer and
service/repository layers underneath.
"""
