import asyncio
import logging
from pathlib import Path

from cron_scheduler.executors.protocol import ProcessLauncher

logger = logging.getLogger(__name__)


class ShellProcessLauncher(ProcessLauncher):
    """
    Runs commands through the system shell using asyncio subprocesses.
    """

    async def run(self, command: str, cwd: Path) -> int:
        logger.debug("Running '%s' in %s", command, cwd)
        process = await asyncio.create_subprocess_shell(command, cwd=str(cwd))
        return await process.wait()

    async def launch(self, command: str, cwd: Path) -> None:
        # The trailing '&' detaches the command, so the shell itself exits immediately.
        logger.debug("Launching '%s' in %s", command, cwd)
        process = await asyncio.create_subprocess_shell(
            command,
            cwd=str(cwd),
            stdin=asyncio.subprocess.DEVNULL,
            start_new_session=True,
        )
        await process.wait()
