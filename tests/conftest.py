from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Set, Tuple

import pytest

from cron_scheduler.domain.context import RunContext


class MemoryMutex:
    def __init__(self):
        self.held: Set[str] = set()
        self.calls: List[Tuple[str, str]] = []

    async def acquire(self, name: str) -> bool:
        self.calls.append(("acquire", name))
        if name in self.held:
            return False
        self.held.add(name)
        return True

    async def release(self, name: str) -> None:
        self.calls.append(("release", name))
        self.held.discard(name)


class RecordingLauncher:
    def __init__(self, log: Optional[List[str]] = None):
        self.ran: List[Tuple[str, Path]] = []
        self.launched: List[Tuple[str, Path]] = []
        self.log = log if log is not None else []

    async def run(self, command: str, cwd: Path) -> int:
        self.ran.append((command, cwd))
        self.log.append("command")
        return 0

    async def launch(self, command: str, cwd: Path) -> None:
        self.launched.append((command, cwd))
        self.log.append("command")


class RecordingNotifier:
    def __init__(self):
        self.pinged: List[str] = []

    async def ping(self, url: str) -> None:
        self.pinged.append(url)


class RecordingMessage:
    def __init__(self, outbox: list):
        self.outbox = outbox
        self.body = None
        self.subject = None
        self.to = None

    def set_text_body(self, body):
        self.body = body
        return self

    def set_subject(self, subject):
        self.subject = subject
        return self

    def set_to(self, addresses):
        self.to = addresses
        return self

    async def send(self) -> bool:
        self.outbox.append(self)
        return True


class RecordingMailer:
    def __init__(self):
        self.outbox: List[RecordingMessage] = []

    def compose(self) -> RecordingMessage:
        return RecordingMessage(self.outbox)


@pytest.fixture(scope="function")
def mutex() -> MemoryMutex:
    return MemoryMutex()


@pytest.fixture(scope="function")
def launcher() -> RecordingLauncher:
    return RecordingLauncher()


@pytest.fixture(scope="function")
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture(scope="function")
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture(scope="function")
def make_context(tmp_path, launcher, notifier, mailer) -> Callable[..., RunContext]:
    def factory(now: Optional[datetime] = None) -> RunContext:
        instant = now or datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc)
        return RunContext(
            script_root=tmp_path,
            launcher=launcher,
            notifier=notifier,
            mailer=mailer,
            clock=lambda: instant,
        )
    return factory


@pytest.fixture(scope="function")
def context(make_context) -> RunContext:
    return make_context()
