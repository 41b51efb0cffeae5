from datetime import date, datetime, timezone

import pytest

from daytracker.core.dates import ScheduleError, coerce_date, month_end, next_month, previous_month, today_local


def test_today_local_uses_timezone() -> None:
    # 03:00 UTC is still the previous evening in Lima
    now = datetime(2025, 1, 2, 3, 0, tzinfo=timezone.utc)
    assert today_local("America/Lima", now) == date(2025, 1, 1)
    assert today_local("UTC", now) == date(2025, 1, 2)


def test_coerce_date_accepts_timestamps() -> None:
    assert coerce_date("2025-01-04") == date(2025, 1, 4)
    assert coerce_date("2025-01-04T12:30:00Z") == date(2025, 1, 4)
    assert coerce_date(datetime(2025, 1, 4, 8)) == date(2025, 1, 4)


@pytest.mark.parametrize("value", ["", "2025-13-01", "tomorrow", None])
def test_coerce_date_rejects_garbage(value) -> None:
    with pytest.raises(ScheduleError):
        coerce_date(value)


def test_month_helpers() -> None:
    assert next_month(date(2024, 12, 15)) == date(2025, 1, 1)
    assert previous_month(date(2025, 1, 15)) == date(2024, 12, 1)
    assert month_end(date(2024, 2, 10)) == date(2024, 2, 29)
