from .protocol import ProcessLauncher, Notifier
from .shell import ShellProcessLauncher
from .http import HttpNotifier

__all__ = ["ProcessLauncher", "Notifier", "ShellProcessLauncher", "HttpNotifier"]
