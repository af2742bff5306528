"""
Coin control scheduler.

Runs one cycle right after startup, then keeps a single worker task that
sleeps for the interval, runs one cycle to completion, and sleeps again. The
period is therefore interval + cycle duration and cycles cannot overlap.
"""

from __future__ import annotations

import asyncio
from enum import Enum

from loguru import logger

from coincontrol.compat import check_wallet_compatibility
from coincontrol.constants import DEFAULT_INTERVAL_MS, DEFAULT_MAX_BACKOFF_MS
from coincontrol.engine import CycleEngine
from coincontrol.messages import MessageSink
from coincontrol.models import CycleReport


class ErrorPolicy(str, Enum):
    """What the scheduler does when a cycle raises."""

    HALT = "halt"
    BACKOFF = "backoff"


class Scheduler:
    def __init__(
        self,
        engine: CycleEngine,
        messages: MessageSink,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        error_policy: ErrorPolicy = ErrorPolicy.HALT,
        max_backoff_ms: int = DEFAULT_MAX_BACKOFF_MS,
    ):
        self.engine = engine
        self.messages = messages
        self.interval_ms = interval_ms
        self.error_policy = error_policy
        self.max_backoff_ms = max_backoff_ms

        self.consecutive_failures = 0
        self.last_report: CycleReport | None = None

        self._lock = asyncio.Lock()
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> bool:
        """
        Check the wallet, prime the staking unlock, run the first cycle and arm
        the worker. Returns False (after reporting through ``fail``) if the
        wallet is unusable.
        """
        if not await check_wallet_compatibility(self.engine.gateway, self.messages):
            return False

        # Unlock twice: the first staking-only unlock of a wallet session
        # does not fully take effect.
        for _ in range(2):
            if not await self.engine.unlock_for_staking():
                self.messages.fail("Could not unlock wallet for staking.")
                return False

        if not await self.run_once():
            return False

        self.messages.info(f"Coin control set to run every {self.interval_ms} milliseconds.")
        self._task = asyncio.create_task(self._run_loop(self.next_delay_ms()))
        return True

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.debug("Coin control scheduler stopped")

    async def run_once(self) -> bool:
        """
        Run a single cycle under the scheduler lock.

        Returns True if scheduling should continue.
        """
        async with self._lock:
            try:
                self.last_report = await self.engine.run_cycle()
            except Exception as e:
                self.consecutive_failures += 1
                if self.error_policy is ErrorPolicy.HALT:
                    self.messages.fail(f"Coin control failed!  See exception: {e!r}")
                    return False
                logger.exception("Coin control cycle raised")
                self.messages.error(
                    f"Coin control failed ({self.consecutive_failures} in a row), "
                    f"retrying in {self.next_delay_ms()} milliseconds: {e!r}"
                )
                return True

        self.consecutive_failures = 0
        logger.debug(f"Cycle outcome: {self.last_report.outcome.value}")
        return True

    def next_delay_ms(self) -> int:
        if self.consecutive_failures == 0:
            return self.interval_ms
        ceiling = max(self.max_backoff_ms, self.interval_ms)
        return min(self.interval_ms * 2**self.consecutive_failures, ceiling)

    async def _run_loop(self, delay_ms: int) -> None:
        while True:
            await asyncio.sleep(delay_ms / 1000)
            if not await self.run_once():
                logger.warning("Coin control scheduling halted")
                return
            delay_ms = self.next_delay_ms()
