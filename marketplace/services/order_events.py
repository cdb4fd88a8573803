"""
In-process publish/subscribe for new-order events.

Each connected seller dashboard holds an asyncio queue keyed by wholesaler id.
Checkout runs in a worker thread, so publishing hands events to the
subscriber's event loop with ``call_soon_threadsafe``.
"""
from __future__ import annotations

import asyncio
import json
import logging
import threading
from collections import defaultdict
from typing import Any, AsyncIterator, Dict, Optional, Set, Tuple

logger = logging.getLogger("marketplace.realtime")

EVENT_ORDER_CREATED = "order.created"
EVENT_ORDER_STATUS_CHANGED = "order.status_changed"

DEFAULT_QUEUE_SIZE = 100
DEFAULT_KEEPALIVE_SECONDS = 15.0

_Subscription = Tuple[asyncio.Queue, asyncio.AbstractEventLoop]


def _offer(queue: asyncio.Queue, event: Dict[str, Any]) -> None:
    # Slow consumers lose their oldest events rather than blocking publishers
    if queue.full():
        queue.get_nowait()
    queue.put_nowait(event)


class OrderEventBroker:
    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE):
        self._queue_size = queue_size
        self._subscribers: Dict[str, Set[_Subscription]] = defaultdict(set)
        self._lock = threading.Lock()

    def subscribe(self, wholesaler_id) -> asyncio.Queue:
        """Register a queue on the running event loop."""
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_size)
        with self._lock:
            self._subscribers[str(wholesaler_id)].add((queue, loop))
        logger.debug("[realtime] subscribe wholesaler=%s", wholesaler_id)
        return queue

    def unsubscribe(self, wholesaler_id, queue: asyncio.Queue) -> None:
        key = str(wholesaler_id)
        with self._lock:
            subscribers = self._subscribers.get(key)
            if not subscribers:
                return
            for subscription in list(subscribers):
                if subscription[0] is queue:
                    subscribers.discard(subscription)
            if not subscribers:
                self._subscribers.pop(key, None)

    def subscriber_count(self, wholesaler_id) -> int:
        with self._lock:
            return len(self._subscribers.get(str(wholesaler_id), ()))

    def publish(self, wholesaler_id, event_type: str, payload: Dict[str, Any]) -> int:
        """Deliver an event to every subscriber of a wholesaler; return how many were reached."""
        event = {"type": event_type, "data": payload}
        key = str(wholesaler_id)
        with self._lock:
            subscribers = list(self._subscribers.get(key, ()))
        delivered = 0
        for queue, loop in subscribers:
            try:
                loop.call_soon_threadsafe(_offer, queue, event)
                delivered += 1
            except RuntimeError:
                # Subscriber's loop already closed
                self.unsubscribe(key, queue)
        return delivered


def format_sse(event: Dict[str, Any]) -> str:
    """Encode an event as a Server-Sent Events frame."""
    data = json.dumps(event.get("data", {}), ensure_ascii=False, default=str)
    return f"event: {event['type']}\ndata: {data}\n\n"


async def event_stream(
    broker: OrderEventBroker,
    wholesaler_id,
    keepalive_seconds: float = DEFAULT_KEEPALIVE_SECONDS,
    request: Optional[Any] = None,
) -> AsyncIterator[str]:
    """Yield SSE frames for one wholesaler until the client disconnects."""
    queue = broker.subscribe(wholesaler_id)
    try:
        yield ": connected\n\n"
        while True:
            if request is not None and await request.is_disconnected():
                break
            try:
                event = await asyncio.wait_for(queue.get(), timeout=keepalive_seconds)
            except asyncio.TimeoutError:
                yield ": keep-alive\n\n"
                continue
            yield format_sse(event)
    finally:
        broker.unsubscribe(wholesaler_id, queue)
        logger.debug("[realtime] unsubscribe wholesaler=%s", wholesaler_id)


_broker: Optional[OrderEventBroker] = None


def get_order_event_broker() -> OrderEventBroker:
    """Get singleton broker instance."""
    global _broker
    if _broker is None:
        _broker = OrderEventBroker()
    return _broker
