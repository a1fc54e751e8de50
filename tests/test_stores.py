"""Tortoise-backed adapters and a full pass on in-memory SQLite."""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

import pytest
from tortoise import Tortoise

from helpers.notification_ledger import NotificationLedger
from helpers.quiet_hour_store import QuietHourStore
from helpers.reconciliation import LedgerConflict, ReconciliationJob
from helpers.time_window import as_utc, compute_due_window
from helpers.tortoise_config import build_tortoise_config
from helpers.user_directory import UserDirectory
from models.notification import Notification
from models.quiet_hour import QuietHour
from models.user import User
from fakes import FakeMailer


NOW = datetime(2025, 1, 1, 10, 0, tzinfo=timezone.utc)


def at(hour, minute=0):
    return datetime(2025, 1, 1, hour, minute, tzinfo=timezone.utc)


@asynccontextmanager
async def database():
    await Tortoise.init(config=build_tortoise_config("sqlite://:memory:", "sqlite://:memory:"))
    await Tortoise.generate_schemas()
    try:
        yield
    finally:
        await Tortoise.close_connections()


def run_db(test):
    async def wrapper():
        async with database():
            return await test()
    return asyncio.run(wrapper())


def test_list_due_filters_by_window_and_flag():
    async def scenario():
        user = await User.create(name="A", email="a@example.com")
        inside = await QuietHour.create(user=user, start_time=at(10, 30), end_time=at(11, 30))
        await QuietHour.create(user=user, start_time=at(10, 45), end_time=at(11, 30), notified=True)
        await QuietHour.create(user=user, start_time=at(9, 0), end_time=at(9, 30))
        await QuietHour.create(user=user, start_time=at(12, 0), end_time=at(13, 0))
        edge = await QuietHour.create(user=user, start_time=at(9, 55), end_time=at(10, 30))

        due = await QuietHourStore().list_due(compute_due_window(NOW))
        return sorted(b.id for b in due), sorted([inside.id, edge.id])

    got, expected = run_db(scenario)
    assert got == expected


def test_mark_notified_and_user_crud():
    async def scenario():
        store = QuietHourStore()
        user = await User.create(name="A", email="a@example.com")
        other = await User.create(name="B", email="b@example.com")
        first = await store.create(user.id, at(12, 0), at(13, 0))
        second = await store.create(user.id, at(11, 0), at(12, 0))
        foreign = await store.create(other.id, at(11, 0), at(12, 0))

        await store.mark_notified(first.id)
        refreshed = await QuietHour.get(id=first.id)

        listed = [b.id for b in await store.list_for_user(user.id)]
        denied = await store.delete(user.id, foreign.id)
        allowed = await store.delete(user.id, second.id)
        remaining = [b.id for b in await store.list_for_user(user.id)]
        return refreshed.notified, listed, [second.id, first.id], denied, allowed, remaining, [first.id]

    notified, listed, expected_order, denied, allowed, remaining, expected_remaining = run_db(scenario)
    assert notified is True
    assert listed == expected_order
    assert denied is False
    assert allowed is True
    assert remaining == expected_remaining


def test_sweep_expired_removes_only_finished_blocks():
    async def scenario():
        store = QuietHourStore()
        user = await User.create(name="A", email="a@example.com")
        other = await User.create(name="B", email="b@example.com")
        done = await store.create(user.id, at(8, 0), at(9, 0))
        ending_now = await store.create(user.id, at(9, 0), at(10, 0))
        upcoming = await store.create(user.id, at(11, 0), at(12, 0))
        await store.create(other.id, at(8, 0), at(9, 0))

        removed = await store.sweep_expired(user.id, now=NOW)
        left = [b.id for b in await store.list_for_user(user.id)]
        others_left = await QuietHour.filter(user_id=other.id).count()
        return sorted(removed), sorted([done.id, ending_now.id]), left, [upcoming.id], others_left

    removed, expected, left, expected_left, others_left = run_db(scenario)
    assert removed == expected
    assert left == expected_left
    assert others_left == 1


def test_ledger_round_trip_and_unique_constraint():
    async def scenario():
        ledger = NotificationLedger()
        assert await ledger.find(1, 7) is None
        await ledger.record(1, 7, at(10, 30), at(11, 30), NOW)
        found = await ledger.find(1, 7)
        with pytest.raises(LedgerConflict):
            await ledger.record(1, 7, at(10, 30), at(11, 30), NOW)
        return found, await Notification.all().count()

    found, count = run_db(scenario)
    assert found is not None
    assert as_utc(found.sent_at) == NOW
    assert count == 1


def test_user_directory():
    async def scenario():
        user = await User.create(name="A", email="a@example.com")
        no_email = await User.create(name="B")
        directory = UserDirectory()
        return (
            await directory.get_email(user.id),
            await directory.get_email(no_email.id),
            await directory.get_email(9999),
        )

    assert run_db(scenario) == ("a@example.com", None, None)


def test_full_pass_against_database():
    async def scenario():
        user = await User.create(name="A", email="a@example.com")
        block = await QuietHour.create(user=user, start_time=at(10, 30), end_time=at(11, 30))
        mailer = FakeMailer()
        job = ReconciliationJob(
            blocks=QuietHourStore(),
            ledger=NotificationLedger(),
            users=UserDirectory(),
            mailer=mailer,
            cron_secret="s",
            buffer=timedelta(minutes=5),
            horizon=timedelta(minutes=60),
        )
        first = await job.run("s", now=NOW)
        second = await job.run("s", now=NOW + timedelta(minutes=1))
        records = await Notification.filter(quiet_hour_id=block.id, user_id=user.id).count()
        refreshed = await QuietHour.get(id=block.id)
        return first, second, mailer, records, refreshed.notified

    first, second, mailer, records, notified = run_db(scenario)
    assert first.count == 1 and first.sent == 1
    assert second.count == 0
    assert [to for to, _, _ in mailer.sent] == ["a@example.com"]
    assert records == 1
    assert notified is True
