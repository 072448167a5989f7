from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/sessions/auto-complete", methods=["GET", "POST"], endpoint="api_sessions_auto_complete")
    @login_required
    def auto_complete(actor):
        """Sweep trigger: close today's ended sessions. Safe to call repeatedly."""

        report = container.reconciliation_service.reconcile()
        return jsonify(
            {
                "success": True,
                "message": f"Processed {report.sessions_processed} sessions, completed {report.sessions_completed}",
                **report.as_dict(),
            }
        )
