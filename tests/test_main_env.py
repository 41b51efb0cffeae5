import os
from pathlib import Path

import pytest

from daytracker.main import _load_env


def test_env_file_found_from_working_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ".env").write_text("DAYTRACKER_TEST_FLAG=from-file\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DAYTRACKER_TEST_FLAG", raising=False)

    assert Path(_load_env()).resolve() == (tmp_path / ".env").resolve()
    assert os.environ["DAYTRACKER_TEST_FLAG"] == "from-file"


def test_real_env_vars_win(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ".env").write_text("DAYTRACKER_TEST_FLAG=from-file\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DAYTRACKER_TEST_FLAG", "real")

    _load_env()
    assert os.environ["DAYTRACKER_TEST_FLAG"] == "real"
