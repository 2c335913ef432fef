# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

"""
Lock serializing the mutating operations of one manager instance.

Only guards coroutines of the running process. Two processes writing to the
same repositories are not serialized by this lock.
"""

import asyncio
import logging
import time

_logger = logging.getLogger(__name__)


class ManagerLock:
    """Async context manager around an asyncio.Lock which logs waiting and holding durations"""

    def __init__(self, name: str):
        self.name = name
        self._lock = asyncio.Lock()
        self._acquired_at: float | None = None

    def locked(self) -> bool:
        return self._lock.locked()

    async def __aenter__(self) -> "ManagerLock":
        start_time = time.monotonic()
        await self._lock.acquire()
        self._acquired_at = time.monotonic()
        _logger.debug(f"Lock '{self.name}' acquired after {self._acquired_at - start_time:.3f} seconds")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        held_duration = time.monotonic() - self._acquired_at
        self._acquired_at = None
        self._lock.release()
        if exc_type:
            _logger.debug(f"Lock '{self.name}' released after failure ({exc_type.__name__}), held for {held_duration:.3f} seconds")
        else:
            _logger.debug(f"Lock '{self.name}' released, held for {held_duration:.3f} seconds")
