from typing import Protocol


class Mutex(Protocol):
    async def acquire(self, name: str) -> bool:
        """Try to take the lock without waiting. Return True if it was obtained."""
        ...

    async def release(self, name: str) -> None:
        """Release a lock held by this instance. Releasing an unheld lock is a no-op."""
        ...
