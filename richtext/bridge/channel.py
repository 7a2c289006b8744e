"""Outbound channel: one ordered, fire-and-forget pipe into the renderer."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

logger = logging.getLogger(__name__)

# Appended to every instruction so the page's evaluation reports success.
COMPLETION_SUFFIX = ";true;"


class RendererTransport(Protocol):
    """Anything that can hand a script to the renderer's execution context."""

    def inject(self, script: str) -> None: ...


class OutboundChannel:
    """Delivers instructions to the attached transport in ``send`` order.

    With no transport attached, ``send`` is a no-op and the instruction is
    dropped.
    """

    def __init__(self, transport: RendererTransport | None = None) -> None:
        self._transport = transport

    @property
    def attached(self) -> bool:
        return self._transport is not None

    @property
    def transport(self) -> RendererTransport | None:
        return self._transport

    def attach(self, transport: RendererTransport) -> None:
        self._transport = transport
        logger.info("Renderer transport attached")

    def detach(self) -> None:
        if self._transport is not None:
            logger.info("Renderer transport detached")
        self._transport = None

    def send(self, instruction: str) -> bool:
        """Inject ``instruction``. Returns False if it was dropped."""
        if self._transport is None:
            logger.debug(f"No renderer attached, dropping: {instruction[:80]}")
            return False
        self._transport.inject(instruction + COMPLETION_SUFFIX)
        return True


class QueueTransport:
    """Transport backed by an ``asyncio.Queue`` and drained by one pump task.

    ``inject`` never blocks, and a single consumer keeps delivery in the
    order scripts were queued.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[str | None] = asyncio.Queue()

    def inject(self, script: str) -> None:
        self._queue.put_nowait(script)

    def close(self) -> None:
        """Stop the pump after everything queued so far has been delivered."""
        self._queue.put_nowait(None)

    async def pump(self, deliver: Callable[[str], Awaitable[None]]) -> None:
        """Forward queued scripts to ``deliver`` until ``close`` is called."""
        while True:
            script = await self._queue.get()
            if script is None:
                return
            await deliver(script)
