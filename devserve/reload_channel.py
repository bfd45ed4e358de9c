"""Server-sent event channel used to tell browsers to reload."""
from __future__ import annotations

import logging
import queue
from threading import Lock
from typing import Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)

RELOAD_EVENT = "data: reload\n\n"
CONNECTED_COMMENT = ": connected\n\n"
KEEPALIVE_COMMENT = ": ping\n\n"
DEFAULT_KEEPALIVE = 15.0

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Access-Control-Allow-Origin": "*",
}

_CLOSE = None


class ReloadSubscription:
    """One open event stream.

    Iterating yields the SSE text to write to the client. ``close`` is called by
    the WSGI server when the connection ends and removes the entry from the
    channel; ``revoke`` ends the stream from the server side.
    """

    def __init__(self, channel: "ReloadChannel", client_id: str, keepalive: float) -> None:
        self.client_id = client_id
        self._channel = channel
        self._keepalive = keepalive
        self._queue: "queue.Queue[Optional[str]]" = queue.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, message: str) -> bool:
        if self._closed:
            return False
        self._queue.put(message)
        return True

    def revoke(self) -> None:
        self._queue.put(_CLOSE)
        self.close()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._channel.unregister(self)

    def __iter__(self) -> Iterator[str]:
        yield CONNECTED_COMMENT
        while True:
            try:
                message = self._queue.get(timeout=self._keepalive)
            except queue.Empty:
                yield KEEPALIVE_COMMENT
                continue
            if message is _CLOSE:
                return
            yield message


class ReloadChannel:
    """Registry of open reload streams plus the broadcast that feeds them."""

    def __init__(self, keepalive: float = DEFAULT_KEEPALIVE) -> None:
        self._clients: Dict[str, ReloadSubscription] = {}
        self._lock = Lock()
        self._keepalive = keepalive

    def register(self, client_id: str) -> ReloadSubscription:
        subscription = ReloadSubscription(self, client_id, self._keepalive)
        with self._lock:
            previous = self._clients.get(client_id)
            self._clients[client_id] = subscription
        if previous is not None:
            previous.revoke()
        logger.debug("SSE: %s registered", client_id)
        return subscription

    def unregister(self, subscription: ReloadSubscription) -> None:
        with self._lock:
            current = self._clients.get(subscription.client_id)
            if current is not subscription:
                return
            del self._clients[subscription.client_id]
        logger.debug("SSE: %s closed", subscription.client_id)

    def broadcast(self, message: str = RELOAD_EVENT) -> int:
        """Push ``message`` to every open stream and return how many took it."""
        with self._lock:
            targets: List[ReloadSubscription] = list(self._clients.values())
        delivered = 0
        for subscription in targets:
            if subscription.push(message):
                delivered += 1
                logger.debug("SSE: %s reloaded", subscription.client_id)
            else:
                logger.debug("SSE: %s already closing, skipped", subscription.client_id)
        return delivered

    def client_ids(self) -> List[str]:
        with self._lock:
            return list(self._clients)

    def __len__(self) -> int:
        with self._lock:
            return len(self._clients)

    def close(self) -> None:
        with self._lock:
            targets = list(self._clients.values())
        for subscription in targets:
            subscription.revoke()
