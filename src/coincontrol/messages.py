"""
Operator-facing message reporting.

The message sink is where coin control reports what it is doing. ``fail`` is
special: it reports a fatal condition and signals the process entry point to
shut down.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod

from loguru import logger

from coincontrol.backends.base import WalletRequest


class MessageSink(ABC):
    @abstractmethod
    def info(self, message: str) -> None: ...

    @abstractmethod
    def warning(self, message: str) -> None: ...

    @abstractmethod
    def error(self, message: str) -> None: ...

    @abstractmethod
    def fail(self, message: str) -> None:
        """Report a fatal condition and signal shutdown."""

    def separator(self) -> None:
        self.info("-" * 40)

    def post_error(self, request: WalletRequest, error: str | None) -> None:
        self.error(f"RPC '{request.method}' failed: {error}")


class LoguruMessageSink(MessageSink):
    """
    Message sink writing to loguru.

    Args:
        shutdown: Event set by ``fail``; owned by the process entry point
    """

    def __init__(self, shutdown: asyncio.Event | None = None):
        self.shutdown = shutdown or asyncio.Event()
        self.failures: list[str] = []

    def info(self, message: str) -> None:
        logger.opt(depth=1).info(message)

    def warning(self, message: str) -> None:
        logger.opt(depth=1).warning(message)

    def error(self, message: str) -> None:
        logger.opt(depth=1).error(message)

    def fail(self, message: str) -> None:
        logger.opt(depth=1).critical(message)
        self.failures.append(message)
        self.shutdown.set()

    @property
    def failed(self) -> bool:
        return bool(self.failures)
