from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class ProcessLauncher(Protocol):
    """
    Protocol class for launching scheduled shell commands.
    """

    async def run(self, command: str, cwd: Path) -> int:
        """
        Run the command and wait for it to finish.

        Args:
            command (str): The shell command line.
            cwd (Path): Working directory for the command.

        Returns:
            int: The exit status of the command.
        """
        ...

    async def launch(self, command: str, cwd: Path) -> None:
        """
        Start the command without waiting for it to finish.

        Args:
            command (str): The shell command line, usually ending with '&'.
            cwd (Path): Working directory for the command.
        """
        ...


@runtime_checkable
class Notifier(Protocol):
    """
    Protocol class for outbound notifications sent after a run.
    """

    async def ping(self, url: str) -> None:
        """
        Issue a GET request to the given URL. The response is ignored.
        """
        ...
