import importlib

import pytest

from config import get_settings_module
from school_attendance.common.clock import FixedClock, SchoolClock
from school_attendance.database.bootstrap import iter_sql_statements


@pytest.mark.parametrize(
    "env,module",
    [
        (None, "config.development"),
        ("production", "config.production"),
        ("PROD", "config.production"),
        ("testing", "config.testing"),
        ("staging", "config.development"),
    ],
)
def test_settings_module_from_app_env(monkeypatch, env, module):
    if env is None:
        monkeypatch.delenv("APP_ENV", raising=False)
    else:
        monkeypatch.setenv("APP_ENV", env)

    assert get_settings_module() == module


def test_policy_minutes_read_from_environment(monkeypatch):
    monkeypatch.setenv("LATE_GRACE_MINUTES", "15")
    monkeypatch.setenv("AUTO_INIT_DB", "yes")
    import config.config as base

    try:
        reloaded = importlib.reload(base)
        assert reloaded.LATE_GRACE_MINUTES == 15
        assert reloaded.EXCUSE_GRACE_MINUTES == 10
        assert reloaded.AUTO_INIT_DB is True
    finally:
        monkeypatch.undo()
        importlib.reload(base)


def test_testing_settings():
    settings = importlib.import_module("config.testing")

    assert settings.TESTING is True
    assert settings.AUTO_INIT_DB is False
    assert settings.DB_CONFIG["database"]


def test_fixed_clock_advances():
    clock = FixedClock()
    start = clock.now()

    assert clock.advance(minutes=11) == clock.now()
    assert (clock.now() - start).total_seconds() == 660


def test_school_clock_returns_naive_local_time():
    assert SchoolClock("Asia/Karachi").now().tzinfo is None


def test_schema_splits_into_statements():
    sql = """
    -- students
    CREATE TABLE a (id INT);

    CREATE TABLE b (
        id INT
    );
    """

    statements = list(iter_sql_statements(sql))

    assert len(statements) == 2
    assert statements[0].startswith("CREATE TABLE a")
