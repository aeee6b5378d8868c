"""Tests for zeek.cli -- argument parsing, dispatch and result output."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from zeek import cli, popups


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("ZEEK_LOG_FILE", raising=False)
    return tmp_path


@pytest.fixture
def result_pipe(monkeypatch: pytest.MonkeyPatch):
    read_fd, write_fd = os.pipe()
    monkeypatch.setattr(cli, "RESULT_FD", write_fd)
    yield read_fd
    os.close(read_fd)


class TestParser:
    def test_buffers_after_double_dash(self) -> None:
        args = cli.build_parser().parse_args(["history", "--", "-l x", "--y"])
        assert (args.command, args.lbuffer, args.rbuffer) == ("history", "-l x", "--y")

    def test_defaults(self) -> None:
        args = cli.build_parser().parse_args([])
        assert (args.command, args.lbuffer, args.rbuffer) == ("help", "", "")
        assert args.log_level == "info"


class TestMain:
    def test_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert cli.main(["help"]) == 0
        assert "usage: zeek" in capsys.readouterr().out

    def test_no_arguments_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert cli.main([]) == 0
        assert "history" in capsys.readouterr().out

    def test_unknown_command(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert cli.main(["bogus"]) == 2
        assert "Unknown command: bogus" in capsys.readouterr().err

    def test_store_dir(self, isolated_env: Path) -> None:
        assert cli.main(["store-dir", "--", "/some/dir"]) == 0
        assert (isolated_env / ".dir_history").read_text() == "/some/dir"

    def test_result_written_to_fd(self, monkeypatch: pytest.MonkeyPatch, result_pipe: int) -> None:
        calls = []

        def fake_history(lbuffer, rbuffer, settings):
            calls.append((lbuffer, rbuffer))
            return "ls -la"

        monkeypatch.setattr(popups, "history_popup", fake_history)
        assert cli.main(["history", "--", "l", "s"]) == 0
        assert calls == [("l", "s")]
        assert os.read(result_pipe, 100) == b"ls -la"

    def test_nothing_selected_writes_nothing(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setattr(popups, "cmd_search_popup", lambda lbuffer, rbuffer, settings: None)
        assert cli.main(["cmd-search", "--", "x", ""]) == 0
        assert capsys.readouterr().out == ""

    def test_failure_returns_one(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        def broken(lbuffer, rbuffer, settings):
            raise OSError("no tty")

        monkeypatch.setattr(popups, "dir_history_popup", broken)
        assert cli.main(["dir-history"]) == 1
        assert "zeek dir-history: no tty" in capsys.readouterr().err

    def test_settings_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        seen = []
        monkeypatch.setenv("ZEEK_MENU_ROW", "5")
        monkeypatch.setattr(popups, "file_search_popup", lambda lbuffer, rbuffer, settings: seen.append(settings))
        cli.main(["file-search"])
        assert seen[0].menu_row == 5


class TestEmitResult:
    def test_closed_fd_falls_back_to_stdout(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        read_fd, write_fd = os.pipe()
        os.close(read_fd)
        os.close(write_fd)
        monkeypatch.setattr(cli, "RESULT_FD", write_fd)
        cli.emit_result("cd /tmp")
        assert capsys.readouterr().out == "cd /tmp"

    def test_empty_result_is_not_written(self, capsys: pytest.CaptureFixture[str]) -> None:
        cli.emit_result("")
        cli.emit_result(None)
        assert capsys.readouterr().out == ""
