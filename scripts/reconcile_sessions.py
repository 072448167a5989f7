"""Close today's ended sessions once. Meant to run from cron every minute or so.

Running it more often than needed, or alongside another instance, is harmless.
"""

from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from school_attendance.container import build_container
from school_attendance.main import configure_logging, load_settings


def main() -> int:
    settings = load_settings()
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(db_config=dict(settings.DB_CONFIG), settings=settings)
    report = container.reconciliation_service.reconcile()
    print(
        f"OK: processed={report.sessions_processed} "
        f"completed={report.sessions_completed} absent_marked={report.absent_marked}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
