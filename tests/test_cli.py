"""Tests for the blt command line."""

import pytest
from click.testing import CliRunner

from bulletlog import __version__, log
from bulletlog.cli import main
from bulletlog.log import read_logs

WIDE = {"COLUMNS": "200"}


@pytest.fixture
def runner():
    return CliRunner()


def blt(runner, log_file, *args, date="20240101"):
    return runner.invoke(main, ["--file", str(log_file), "--date", date, *args], env=WIDE)


class TestAdd:
    def test_end_to_end_note(self, runner, log_file):
        result = blt(runner, log_file, "add", "buy", "milk")
        assert result.exit_code == 0, result.output
        assert log_file.read_text() == "## 20240101\n\n* buy milk\n\n"
        assert "buy milk" in result.output

    def test_task(self, runner, log_file):
        result = blt(runner, log_file, "task", "call bob")
        assert result.exit_code == 0, result.output
        assert log_file.read_text() == "## 20240101\n\n- call bob\n\n"

    @pytest.mark.parametrize("alias,mark", [("a", "*"), ("note", "*"), ("t", "-")])
    def test_aliases(self, runner, log_file, alias, mark):
        result = blt(runner, log_file, alias, "hello")
        assert result.exit_code == 0, result.output
        assert f"{mark} hello\n" in log_file.read_text()

    def test_new_day_goes_on_top(self, runner, log_file):
        blt(runner, log_file, "add", "old", date="20240101")
        blt(runner, log_file, "add", "new", date="20240102")
        assert log_file.read_text() == "## 20240102\n\n* new\n\n## 20240101\n\n* old\n\n"

    def test_records_history(self, runner, log_file):
        blt(runner, log_file, "task", "write report")
        record = read_logs()[-1]
        assert record["event"] == "task"
        assert record["entry"] == "- write report"
        assert record["date"] == "20240101"

    def test_nothing_to_add(self, runner, log_file):
        result = blt(runner, log_file, "add")
        assert result.exit_code == 2
        assert log_file.read_text() == ""

    def test_creates_file_from_environment(self, runner, tmp_path, monkeypatch):
        path = tmp_path / "sub" / "journal"
        monkeypatch.setenv("BULLETLOG_FILE", str(path))
        monkeypatch.setenv("BULLETLOG_DATE", "20240301")
        result = runner.invoke(main, ["add", "from env"])
        assert result.exit_code == 0, result.output
        assert path.read_text() == "## 20240301\n\n* from env\n\n"

    def test_malformed_log_is_fatal(self, runner, log_file):
        log_file.write_text("garbage\n")
        result = blt(runner, log_file, "add", "x")
        assert result.exit_code == 1
        assert "Error" in result.output
        assert log_file.read_text() == "garbage\n"
        assert read_logs() == []

    def test_not_utf8_is_reported(self, runner, log_file):
        log_file.write_bytes(b"## 20240101\n\n* caf\xe9\n\n")
        result = blt(runner, log_file, "add", "x")
        assert result.exit_code == 1
        assert "Error" in result.output
        assert log_file.read_bytes() == b"## 20240101\n\n* caf\xe9\n\n"

    def test_history_failure_only_warns(self, runner, log_file, tmp_path, monkeypatch):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        monkeypatch.setattr(log, "LOGS_FILE", blocker / "history.jsonl")
        result = blt(runner, log_file, "add", "x")
        assert result.exit_code == 0, result.output
        assert "Warning" in result.output
        assert log_file.read_text() == "## 20240101\n\n* x\n\n"

    def test_bad_date_is_fatal(self, runner, log_file):
        result = blt(runner, log_file, "add", "x", date="2024-01-01")
        assert result.exit_code == 1
        assert "Error" in result.output


class TestList:
    def test_notes(self, runner, log_file):
        log_file.write_text("## 20240101\n\n* one\n- a task\n* two [red]\n\n")
        result = blt(runner, log_file, "ls")
        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == ["* one", "* two [red]"]

    def test_no_notes(self, runner, log_file):
        result = blt(runner, log_file, "notes")
        assert result.exit_code == 0
        assert "No notes yet." in result.output

    def test_tasks(self, runner, log_file):
        log_file.write_text("## 20240101\n\n- first\nx done\n- second\n\n")
        result = blt(runner, log_file, "ts")
        assert result.exit_code == 0, result.output
        assert "first" in result.output
        assert "second" in result.output
        assert "done" not in result.output

    def test_no_tasks(self, runner, log_file):
        result = blt(runner, log_file, "tasks")
        assert "No pending tasks." in result.output


class TestComplete:
    def test_complete(self, runner, log_file):
        log_file.write_text("## 20240101\n\n- first\n- second\n\n")
        result = blt(runner, log_file, "complete", "1")
        assert result.exit_code == 0, result.output
        assert log_file.read_text() == "## 20240101\n\n- first\nx second\n\n"
        assert "Completed" in result.output
        assert read_logs()[-1]["event"] == "complete"

    def test_alias(self, runner, log_file):
        log_file.write_text("## 20240101\n\n- first\n\n")
        result = blt(runner, log_file, "comp", "0")
        assert result.exit_code == 0, result.output
        assert "x first\n" in log_file.read_text()

    def test_listing_not_utf8_is_reported(self, runner, log_file):
        log_file.write_bytes(b"## 20240101\n\n- caf\xe9\n\n")
        for command in ("tasks", "notes", "complete"):
            args = [command, "0"] if command == "complete" else [command]
            result = blt(runner, log_file, *args)
            assert result.exit_code == 1, command
            assert "Error" in result.output

    def test_out_of_range(self, runner, log_file):
        original = "## 20240101\n\n- first\n\n"
        log_file.write_text(original)
        result = blt(runner, log_file, "complete", "99")
        assert result.exit_code == 0
        assert "No pending task at index 99" in result.output
        assert log_file.read_text() == original
        assert read_logs() == []

    @pytest.mark.parametrize("index", ["abc", "-1"])
    def test_bad_index(self, runner, log_file, index):
        original = "## 20240101\n\n- first\n\n"
        log_file.write_text(original)
        result = blt(runner, log_file, "complete", "--", index)
        assert result.exit_code == 2
        assert "non-negative integer" in result.output
        assert log_file.read_text() == original


class TestMisc:
    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert __version__ in result.output

    def test_history(self, runner, log_file):
        blt(runner, log_file, "add", "buy milk")
        result = runner.invoke(main, ["history"], env=WIDE)
        assert result.exit_code == 0, result.output
        assert "buy milk" in result.output

    def test_empty_history(self, runner):
        result = runner.invoke(main, ["history"])
        assert "No history yet." in result.output
