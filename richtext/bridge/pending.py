"""Pending request table: correlates queries with their single response.

Every query gets its own request id, which travels to the renderer with the
query and comes back as ``requestId`` on the response, so concurrent queries
of the same kind do not clobber each other. A response without an id (older
editor pages) settles the oldest outstanding request of its kind.
A request whose caller already gave up is skipped and never settled.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any

from richtext.errors import BridgeTimeoutError
from richtext.vocabulary import QueryKind

logger = logging.getLogger(__name__)


@dataclass
class PendingRequest:
    request_id: str
    kind: QueryKind
    future: asyncio.Future[Any]
    timeout_handle: asyncio.TimerHandle | None = field(default=None, repr=False)

    def cancel_timer(self) -> None:
        if self.timeout_handle is not None:
            self.timeout_handle.cancel()
            self.timeout_handle = None


class PendingRequestTable:
    """Outstanding queries, in issue order.

    ``timeout`` is in seconds; None means requests wait until answered,
    cancelled or rejected.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout
        self._requests: dict[str, PendingRequest] = {}
        self._ids = itertools.count(1)

    def __len__(self) -> int:
        return len(self._requests)

    def __contains__(self, request_id: str) -> bool:
        return request_id in self._requests

    def outstanding(self, kind: QueryKind | None = None) -> list[str]:
        """Request ids still waiting, oldest first."""
        return [
            r.request_id for r in self._requests.values() if kind is None or r.kind == kind
        ]

    def open(self, kind: QueryKind) -> PendingRequest:
        """Register a new request. Must be called from inside the event loop."""
        loop = asyncio.get_running_loop()
        request_id = str(next(self._ids))
        request = PendingRequest(request_id, kind, loop.create_future())
        if self.timeout is not None:
            request.timeout_handle = loop.call_later(self.timeout, self._expire, request_id)
        self._requests[request_id] = request
        logger.debug(f"Opened {request_id} ({len(self._requests)} outstanding)")
        return request

    def resolve(self, kind: QueryKind, data: Any, request_id: str | None = None) -> bool:
        """Settle one request of ``kind`` with ``data``.

        Returns False for an orphaned response, which is dropped.
        """
        if request_id is not None:
            request = self._requests.get(request_id)
            if request is None or request.kind != kind or request.future.done():
                logger.debug(f"Orphaned {kind.value} response for {request_id}")
                return False
        else:
            request = next(
                (r for r in self._requests.values() if r.kind == kind and not r.future.done()),
                None,
            )
            if request is None:
                logger.debug(f"Orphaned {kind.value} response (no request outstanding)")
                return False

        self._pop(request.request_id)
        request.future.set_result(data)
        return True

    def cancel(self, request_id: str) -> bool:
        """Cancel one request; its awaiter gets ``CancelledError``."""
        request = self._pop(request_id)
        if request is None:
            return False
        request.future.cancel()
        return True

    def reject_all(self, exc: BaseException) -> int:
        """Fail every outstanding request with ``exc``. Returns how many."""
        requests = list(self._requests.values())
        for request in requests:
            self._pop(request.request_id)
            if not request.future.done():
                request.future.set_exception(exc)
        if requests:
            logger.info(f"Rejected {len(requests)} pending request(s): {exc}")
        return len(requests)

    def _pop(self, request_id: str) -> PendingRequest | None:
        request = self._requests.pop(request_id, None)
        if request is not None:
            request.cancel_timer()
        return request

    def _expire(self, request_id: str) -> None:
        request = self._requests.pop(request_id, None)
        if request is None:
            return
        request.timeout_handle = None
        logger.warning(f"Request {request_id} timed out after {self.timeout}s")
        if not request.future.done():
            request.future.set_exception(
                BridgeTimeoutError(request.kind.value, request_id, self.timeout)
            )
