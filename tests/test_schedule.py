"""Tests for the polling entry point."""

import asyncio
from datetime import datetime, timedelta, timezone

import schedule
from helpers.reconciliation import ReconciliationJob
from fakes import Block, FakeBlocks, FakeLedger, FakeMailer, FakeUsers


def _job(blocks, mailer, secret="loop-secret"):
    return ReconciliationJob(
        blocks=blocks,
        ledger=FakeLedger(),
        users=FakeUsers({7: "a@example.com"}),
        mailer=mailer,
        cron_secret=secret,
    )


def test_run_once_uses_configured_secret(monkeypatch):
    start = datetime.now(timezone.utc) + timedelta(minutes=10)
    blocks, mailer = FakeBlocks([Block(1, 7, start, start + timedelta(hours=1))]), FakeMailer()
    monkeypatch.setattr(schedule, "get_reconciliation_job", lambda: _job(blocks, mailer))

    summary = asyncio.run(schedule.run_once())

    assert summary.sent == 1
    assert mailer.attempts == ["a@example.com"]


def test_run_once_logs_and_returns_none_on_failure(monkeypatch):
    blocks, mailer = FakeBlocks(fail_list=True), FakeMailer()
    monkeypatch.setattr(schedule, "get_reconciliation_job", lambda: _job(blocks, mailer))
    assert asyncio.run(schedule.run_once()) is None


def test_run_once_without_secret_does_nothing(monkeypatch):
    blocks, mailer = FakeBlocks(), FakeMailer()
    monkeypatch.setattr(schedule, "get_reconciliation_job", lambda: _job(blocks, mailer, secret=None))
    assert asyncio.run(schedule.run_once()) is None
    assert blocks.calls == []


def test_run_once_survives_unexpected_errors(monkeypatch):
    blocks, mailer = FakeBlocks(), FakeMailer()
    monkeypatch.setenv("DISPLAY_TIMEZONE", "Not/AZone")
    monkeypatch.setattr(schedule, "get_reconciliation_job", lambda: _job(blocks, mailer))
    assert asyncio.run(schedule.run_once()) is None


def test_run_once_survives_failing_job(monkeypatch):
    class BrokenJob:
        cron_secret = "x"

        async def run(self, secret, now=None):
            raise RuntimeError("database went away")

    monkeypatch.setattr(schedule, "get_reconciliation_job", BrokenJob)
    assert asyncio.run(schedule.run_once()) is None
