"""Tests for wicket.batch — command-line batch jobs."""

import io
import logging

import pytest

from wicket.app import App
from wicket.batch import BatchRunner


def _runner() -> tuple[BatchRunner, list[str]]:
    calls: list[str] = []
    runner = BatchRunner()

    @runner.job("sendEmails")
    def send_emails():
        calls.append("sendEmails")

    @runner.job("cleanupLogs")
    async def cleanup_logs():
        calls.append("cleanupLogs")

    return runner, calls


class TestRegistry:
    def test_names_in_registration_order(self) -> None:
        runner, _ = _runner()
        assert runner.names == ("sendEmails", "cleanupLogs")
        assert len(runner) == 2
        assert "sendEmails" in runner
        assert "missing" not in runner

    def test_reregistering_keeps_position(self) -> None:
        runner, _ = _runner()
        runner.register("sendEmails", lambda: None)
        assert runner.names == ("sendEmails", "cleanupLogs")


class TestRun:
    def test_no_args_lists_jobs(self) -> None:
        runner, calls = _runner()
        out = io.StringIO()
        assert runner.run([], out=out) == 0
        assert out.getvalue() == "Available batch jobs:\n - sendEmails\n - cleanupLogs\n"
        assert calls == []

    def test_runs_sync_job(self) -> None:
        runner, calls = _runner()
        assert runner.run(["sendEmails"], out=io.StringIO()) == 0
        assert calls == ["sendEmails"]

    def test_runs_async_job(self) -> None:
        runner, calls = _runner()
        assert runner.run(["cleanupLogs"], out=io.StringIO()) == 0
        assert calls == ["cleanupLogs"]

    def test_extra_args_ignored(self) -> None:
        runner, calls = _runner()
        assert runner.run(["sendEmails", "--force"], out=io.StringIO()) == 0
        assert calls == ["sendEmails"]

    def test_unknown_job(self) -> None:
        runner, calls = _runner()
        out = io.StringIO()
        assert runner.run(["nope"], out=out) == 1
        assert out.getvalue() == "Batch job 'nope' not found.\n"
        assert calls == []

    def test_failing_job(self, caplog: pytest.LogCaptureFixture) -> None:
        runner = BatchRunner()

        @runner.job("explode")
        def explode():
            raise RuntimeError("disk full")

        out = io.StringIO()
        caplog.set_level(logging.ERROR, logger="wicket")
        assert runner.run(["explode"], out=out) == 1
        assert out.getvalue() == "Error in batch job 'explode': disk full\n"
        assert "Error in batch job 'explode': disk full" in caplog.text

    async def test_run_async_inside_loop(self) -> None:
        runner, calls = _runner()
        assert await runner.run_async(["cleanupLogs"], out=io.StringIO()) == 0
        assert calls == ["cleanupLogs"]


class TestAppBatch:
    def test_app_decorator_and_run(self, capsys: pytest.CaptureFixture[str]) -> None:
        app = App()
        ran: list[bool] = []

        @app.batch("sendEmails")
        def send_emails():
            ran.append(True)

        assert app.batch_jobs.names == ("sendEmails",)
        assert app.run_batch([]) == 0
        assert " - sendEmails" in capsys.readouterr().out
        assert app.run_batch(["sendEmails"]) == 0
        assert ran == [True]
