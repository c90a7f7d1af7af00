import pytest

from bulletlog import config, log


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep history and global config out of the real home directory."""
    home = tmp_path / "home"
    monkeypatch.setattr(log, "LOGS_FILE", home / "history.jsonl")
    monkeypatch.setattr(config, "GLOBAL_CONFIG_FILE", home / "config")
    monkeypatch.delenv("BULLETLOG_FILE", raising=False)
    monkeypatch.delenv("BULLETLOG_DATE", raising=False)
    return home


@pytest.fixture
def log_dir(tmp_path):
    path = tmp_path / "logs"
    path.mkdir()
    return path


@pytest.fixture
def log_file(log_dir):
    path = log_dir / ".BULLETLOG"
    path.write_text("", encoding="utf-8")
    return path
