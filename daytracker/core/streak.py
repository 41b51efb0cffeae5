from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import date
from pathlib import Path

from loguru import logger


@dataclass(slots=True)
class StreakData:
    current_streak: int = 0
    last_completed_date: str | None = None


class StreakStore:
    """
    Day streak kept in a local JSON file.

    The streak grows by one for each consecutive day on which every todo of
    that day was done. It lives outside the task store and is never
    reconciled with it.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> StreakData:
        if not self.path.exists():
            return StreakData()
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            last = raw.get("last_completed_date")
            if last is not None:
                last = date.fromisoformat(str(last)).isoformat()
            return StreakData(current_streak=int(raw.get("current_streak", 0)), last_completed_date=last)
        except (OSError, ValueError, TypeError, AttributeError) as exc:
            logger.warning("streak file unreadable path={} err={}", self.path, exc)
            return StreakData()

    def _save(self, data: StreakData) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(asdict(data)), encoding="utf-8")
        except OSError as exc:
            logger.warning("streak file not written path={} err={}", self.path, exc)

    def update(self, all_completed: bool, today: date) -> int:
        data = self.load()
        if not all_completed:
            return data.current_streak
        today_iso = today.isoformat()
        if data.last_completed_date == today_iso:
            return data.current_streak

        new_streak = 1
        if data.last_completed_date:
            gap = abs((today - date.fromisoformat(data.last_completed_date)).days)
            if gap == 1:
                new_streak = data.current_streak + 1
            elif gap == 0:
                new_streak = data.current_streak

        self._save(StreakData(current_streak=new_streak, last_completed_date=today_iso))
        return new_streak

    def validate(self, today: date) -> int:
        data = self.load()
        if not data.last_completed_date:
            return 0
        gap = abs((today - date.fromisoformat(data.last_completed_date)).days)
        if gap > 1:
            # keep the date so a later completion starts a fresh streak
            self._save(StreakData(current_streak=0, last_completed_date=data.last_completed_date))
            return 0
        return data.current_streak
