import asyncio
import json
import uuid

from marketplace.services import order_events
from marketplace.services.order_events import OrderEventBroker, event_stream, format_sse


def test_format_sse_frame():
    frame = format_sse({"type": "order.created", "data": {"order_number": "ORD-1", "product": "사과"}})
    assert frame.startswith("event: order.created\ndata: ")
    assert frame.endswith("\n\n")
    payload = json.loads(frame.split("data: ", 1)[1])
    assert payload == {"order_number": "ORD-1", "product": "사과"}


def test_publish_reaches_only_matching_wholesaler():
    broker = OrderEventBroker()
    mine, theirs = uuid.uuid4(), uuid.uuid4()

    async def scenario():
        queue = broker.subscribe(mine)
        other = broker.subscribe(theirs)
        assert broker.publish(mine, "order.created", {"order_id": "1"}) == 1
        event = await asyncio.wait_for(queue.get(), timeout=1)
        assert other.empty()
        broker.unsubscribe(mine, queue)
        broker.unsubscribe(theirs, other)
        return event

    event = asyncio.run(scenario())
    assert event == {"type": "order.created", "data": {"order_id": "1"}}
    assert broker.subscriber_count(mine) == 0
    assert broker.publish(mine, "order.created", {}) == 0


def test_full_queue_drops_oldest_event():
    broker = OrderEventBroker(queue_size=2)
    wholesaler_id = uuid.uuid4()

    async def scenario():
        queue = broker.subscribe(wholesaler_id)
        for n in range(3):
            broker.publish(wholesaler_id, "order.created", {"n": n})
        await asyncio.sleep(0)
        return [queue.get_nowait()["data"]["n"] for _ in range(queue.qsize())]

    assert asyncio.run(scenario()) == [1, 2]


def test_event_stream_yields_events_and_keepalive():
    broker = OrderEventBroker()
    wholesaler_id = uuid.uuid4()

    async def scenario():
        stream = event_stream(broker, wholesaler_id, keepalive_seconds=0.01)
        frames = [await stream.__anext__()]
        frames.append(await stream.__anext__())
        broker.publish(wholesaler_id, "order.status_changed", {"status": "confirmed"})
        frames.append(await stream.__anext__())
        await stream.aclose()
        return frames

    frames = asyncio.run(scenario())
    assert frames[0] == ": connected\n\n"
    assert frames[1] == ": keep-alive\n\n"
    assert frames[2].startswith("event: order.status_changed")
    assert broker.subscriber_count(wholesaler_id) == 0


def test_checkout_publishes_order_created(db_session, make_retailer, make_wholesaler, make_product):
    from marketplace.db import schemas
    from marketplace.db.repositories import retailers as retailer_repo
    from marketplace.services.order_service import checkout

    retailer = make_retailer()
    wholesaler = make_wholesaler()
    product = make_product(wholesaler)
    retailer_repo.add_cart_item(
        db_session, retailer.id, schemas.CartItemCreate(product_id=product.id, quantity=2), product.price
    )
    published = []

    class _Recorder:
        def publish(self, wholesaler_id, event_type, payload):
            published.append((wholesaler_id, event_type, payload))
            return 0

    order_events._broker = _Recorder()
    orders = checkout(db_session, retailer, schemas.CheckoutRequest())
    assert len(published) == 1
    wholesaler_id, event_type, payload = published[0]
    assert wholesaler_id == wholesaler.id
    assert event_type == "order.created"
    assert payload["order_number"] == orders[0].order_number
    assert payload["total_amount"] == 2 * product.price
