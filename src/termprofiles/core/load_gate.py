from __future__ import annotations

import asyncio
from enum import Enum

from loguru import logger

from termprofiles.core.errors import ProfilesLoadTimeoutError


class GateState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


class LoadGate:
    """
    "Profiles have been read at least once."

    arm() moves the gate to LOADING and returns a generation token. Only the
    holder of the newest token can release it, so an older reload finishing
    late never opens the gate under a newer one. Every waiter queued while
    LOADING is woken in the same release.
    """

    def __init__(self) -> None:
        self.state = GateState.UNINITIALIZED
        self._generation = 0
        self._waiters: list[asyncio.Future[None]] = []

    @property
    def generation(self) -> int:
        return self._generation

    def arm(self) -> int:
        self._generation += 1
        self.state = GateState.LOADING
        logger.debug(f"LoadGate armed (generation={self._generation})")
        return self._generation

    def release(self, token: int) -> bool:
        if token != self._generation:
            logger.debug(f"LoadGate: stale release {token} ignored (current={self._generation})")
            return False
        self.state = GateState.READY
        waiters, self._waiters = self._waiters, []
        for fut in waiters:
            if not fut.done():
                fut.set_result(None)
        logger.debug(f"LoadGate released {len(waiters)} waiter(s)")
        return True

    async def wait(self, timeout: float | None = None) -> None:
        if self.state is GateState.READY:
            return
        fut: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(fut)
        try:
            if timeout is None:
                await fut
            else:
                await asyncio.wait_for(fut, timeout)
        except asyncio.TimeoutError:
            raise ProfilesLoadTimeoutError(timeout) from None
        finally:
            if fut in self._waiters:
                self._waiters.remove(fut)
