from datetime import date
from pathlib import Path

from daytracker.core.streak import StreakStore


def test_consecutive_days_increment(tmp_path: Path) -> None:
    store = StreakStore(tmp_path / "streak.json")

    assert store.update(True, date(2025, 1, 1)) == 1
    assert store.update(True, date(2025, 1, 1)) == 1
    assert store.update(True, date(2025, 1, 2)) == 2
    assert store.load().last_completed_date == "2025-01-02"


def test_incomplete_day_keeps_count(tmp_path: Path) -> None:
    store = StreakStore(tmp_path / "streak.json")
    store.update(True, date(2025, 1, 1))

    assert store.update(False, date(2025, 1, 2)) == 1


def test_gap_resets(tmp_path: Path) -> None:
    store = StreakStore(tmp_path / "streak.json")
    store.update(True, date(2025, 1, 1))
    store.update(True, date(2025, 1, 2))

    assert store.validate(date(2025, 1, 3)) == 2
    assert store.validate(date(2025, 1, 5)) == 0
    assert store.load().last_completed_date == "2025-01-02"
    assert store.update(True, date(2025, 1, 5)) == 1


def test_corrupt_file_treated_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "streak.json"
    path.write_text("{not json", encoding="utf-8")
    store = StreakStore(path)

    assert store.load().current_streak == 0
    assert store.update(True, date(2025, 1, 1)) == 1
