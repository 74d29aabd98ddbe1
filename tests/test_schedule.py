from datetime import datetime, timedelta

import pytest

from cron_scheduler.config import SchedulerSettings
from cron_scheduler.domain.callback_event import CallbackEvent
from cron_scheduler.domain.event import Event
from cron_scheduler.mutexes.file import FileMutex
from cron_scheduler.mutexes.sqlalchemy import SqlAlchemyMutex
from cron_scheduler.schedule import Schedule


@pytest.fixture(scope="function")
def settings(tmp_path) -> SchedulerSettings:
    return SchedulerSettings(python_binary="python3", cli_script_name="manage.py", mutex_path=tmp_path / "mutex")


@pytest.fixture(scope="function")
def schedule(mutex, settings) -> Schedule:
    return Schedule(mutex=mutex, settings=settings)


def test_exec_registers_event(schedule: Schedule, mutex) -> None:
    event = schedule.exec("echo hi")

    assert isinstance(event, Event)
    assert event.command == "echo hi"
    assert schedule.events == [event]
    assert event._mutex is mutex


def test_command_prefixes_cli_script(schedule: Schedule) -> None:
    event = schedule.command("cache/flush")

    assert event.command == "python3 manage.py cache/flush"


def test_call_registers_callback_event(schedule: Schedule) -> None:
    event = schedule.call(print, ["hello"])

    assert isinstance(event, CallbackEvent)
    assert event.parameters == ["hello"]
    assert schedule.events == [event]


def test_default_mutex_is_file_mutex(settings: SchedulerSettings) -> None:
    schedule = Schedule(settings=settings)

    assert isinstance(schedule.mutex, FileMutex)
    assert schedule.mutex.directory == settings.mutex_path
    assert schedule.exec("echo hi")._mutex is schedule.mutex


def test_mutex_url_selects_database_mutex(tmp_path) -> None:
    settings = SchedulerSettings(mutex_url=f"sqlite+aiosqlite:///{tmp_path}/mutex.db", mutex_expires_after=600)
    mutex = Schedule(settings=settings).mutex

    assert isinstance(mutex, SqlAlchemyMutex)
    assert mutex.expires_after == timedelta(minutes=10)


@pytest.mark.asyncio
async def test_on_one_server_with_database_mutex(tmp_path, make_context) -> None:
    settings = SchedulerSettings(mutex_url=f"sqlite+aiosqlite:///{tmp_path}/mutex.db", mutex_path=tmp_path / "mutex")
    first = Schedule(settings=settings)
    second = Schedule(settings=settings)
    event = first.exec("echo hi").on_one_server()
    second.exec("echo hi").on_one_server()

    assert await first.due_events(make_context()) == [event]
    assert await second.due_events(make_context()) == []

    await first.mutex.dispose()
    await second.mutex.dispose()


@pytest.mark.asyncio
async def test_daily_at_midnight_end_to_end(schedule: Schedule, make_context) -> None:
    event = schedule.exec("echo hi").daily_at("00:00")

    # Naive instants are local time, which is the zone used without timezone().
    assert await schedule.due_events(make_context(datetime(2024, 6, 3, 0, 0, 0))) == [event]
    assert await schedule.due_events(make_context(datetime(2024, 6, 4, 0, 0, 0))) == [event]
    assert await schedule.due_events(make_context(datetime(2024, 6, 3, 0, 1, 0))) == []


@pytest.mark.asyncio
async def test_due_events_preserve_registration_order(schedule: Schedule, make_context) -> None:
    first = schedule.exec("first")
    schedule.exec("second").hourly()
    third = schedule.call(lambda ctx: None)
    fourth = schedule.exec("fourth").when(lambda ctx: True)
    schedule.exec("fifth").skip(lambda ctx: True)

    due = await schedule.due_events(make_context(datetime(2024, 6, 3, 10, 15)))

    assert due == [first, third, fourth]


@pytest.mark.asyncio
async def test_call_then_end_to_end(schedule: Schedule, context) -> None:
    order = []

    def job(ctx):
        order.append("job")
        return 42

    event = schedule.call(job).then(lambda ctx: order.append("callback"))

    assert await event.run(context) == 42
    assert order == ["job", "callback"]


@pytest.mark.asyncio
async def test_run_due_events(schedule: Schedule, make_context, launcher) -> None:
    schedule.exec("echo due")
    schedule.exec("echo later").daily_at("23:59")
    context = make_context(datetime(2024, 6, 3, 10, 15))

    ran = await schedule.run_due_events(context)

    assert [event.command for event in ran] == ["echo due"]
    assert launcher.launched == [("echo due > /dev/null 2>&1 &", context.script_root)]
