from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from cron_scheduler.executors.http import HttpNotifier
from cron_scheduler.executors.protocol import Notifier, ProcessLauncher
from cron_scheduler.executors.shell import ShellProcessLauncher
from cron_scheduler.mailers.protocol import Mailer


class RunContext(BaseModel):
    """
    Resources handed to every filter, callback and run of a scheduled event.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    script_root: Path = Field(default_factory=Path.cwd, description="Working directory for scheduled commands")
    mailer: Optional[Mailer] = Field(None, description="Mailer used to e-mail command output")
    launcher: ProcessLauncher = Field(default_factory=ShellProcessLauncher, description="Runs scheduled commands")
    notifier: Notifier = Field(default_factory=HttpNotifier, description="Pings URLs after a run")
    clock: Callable[[], datetime] = Field(
        default=lambda: datetime.now(timezone.utc),
        description="Returns the instant events are evaluated against"
    )
    extras: Dict[str, Any] = Field(default_factory=dict, description="Host-specific resources")

    def now(self) -> datetime:
        return self.clock()
