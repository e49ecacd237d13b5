from datetime import date, datetime

import pytest

from crew_attendance.common.datetime_utils import as_day, month_bounds, parse_month
from crew_attendance.common.validators import require_positive_id
from crew_attendance.common.work_calendar import WorkCalendar
from crew_attendance.config import get_settings_module
from crew_attendance.core.exceptions import ValidationError
from crew_attendance.database.bootstrap import SCHEMA_PATH, iter_sql_statements
from crew_attendance.database.connection import DBConfig


def test_as_day_accepts_every_stored_shape():
    assert as_day(date(2025, 1, 15)) == date(2025, 1, 15)
    assert as_day(datetime(2025, 1, 15, 23, 59)) == date(2025, 1, 15)
    assert as_day("2025-01-15T08:00:00") == date(2025, 1, 15)
    assert as_day(" 2025 -01 -15 ") == date(2025, 1, 15)


def test_as_day_rejects_garbage():
    with pytest.raises(ValidationError):
        as_day("15/01/2025")
    with pytest.raises(ValidationError):
        as_day(20250115)


def test_month_helpers():
    assert parse_month("2024-02") == (2024, 2)
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    with pytest.raises(ValidationError):
        parse_month("2024-13")


@pytest.mark.parametrize("value", [None, "x", 0, -3])
def test_require_positive_id_rejects(value):
    with pytest.raises(ValidationError):
        require_positive_id(value, "project_id")


def test_work_calendar_from_settings():
    cal = WorkCalendar.from_settings(count_weekends=False, holidays=["2025-01-01", " ", ""])

    assert cal.holidays == frozenset({date(2025, 1, 1)})
    assert not cal.is_counted_day(date(2025, 1, 1))
    assert not cal.is_counted_day(date(2025, 1, 4))
    assert cal.is_counted_day(date(2025, 1, 2))


@pytest.mark.parametrize(
    "env, module",
    [
        ("production", "crew_attendance.config.production"),
        ("TEST", "crew_attendance.config.testing"),
        ("anything", "crew_attendance.config.development"),
    ],
)
def test_settings_module_follows_app_env(monkeypatch, env, module):
    monkeypatch.setenv("APP_ENV", env)

    assert get_settings_module() == module


def test_sql_splitter_keeps_quoted_semicolons():
    sql = "INSERT INTO t VALUES ('a;b');\nINSERT INTO t VALUES (\"c;d\");\nSELECT 1"

    assert list(iter_sql_statements(sql)) == [
        "INSERT INTO t VALUES ('a;b')",
        'INSERT INTO t VALUES ("c;d")',
        "SELECT 1",
    ]


def test_schema_declares_unique_attendance_triple():
    statements = list(iter_sql_statements(SCHEMA_PATH.read_text(encoding="utf-8")))
    attendances = [s for s in statements if "CREATE TABLE IF NOT EXISTS attendances" in s]

    assert len(attendances) == 1
    assert "UNIQUE KEY ux_attendances_worker_date_project (worker_id, work_date, project_id)" in attendances[0]


def test_db_config_from_settings_dict():
    cfg = DBConfig.from_dict({"host": "db", "port": "3307", "user": "crew", "password": "secret", "database": "site"})

    assert cfg.port == 3307
    assert cfg.connect_timeout == 10
    assert cfg.describe() == "crew@db:3307/site"
    assert "secret" not in cfg.describe()
