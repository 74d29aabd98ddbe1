import logging

import aiohttp

from cron_scheduler.executors.protocol import Notifier

logger = logging.getLogger(__name__)


class HttpNotifier(Notifier):
    """
    Notifier that pings URLs using aiohttp.
    """

    def __init__(self, timeout: float = 30.0):
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def ping(self, url: str) -> None:
        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.get(url) as response:
                logger.debug("Pinged %s, status %s", url, response.status)
