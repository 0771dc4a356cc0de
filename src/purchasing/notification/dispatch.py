"""Order notification dispatch — reacts to Order events.

Delivery is best-effort. A failing or raising notifier is logged and the
event is dropped; the order operation that raised the event has already
been committed and is never affected.
"""

import structlog
from protean.utils.mixins import handle

from purchasing.domain import purchasing
from purchasing.notification import get_notifier, templates
from purchasing.order.events import OrderCancelled, OrderCompleted, OrderPlaced, OrderRefunded
from purchasing.order.order import Order

logger = structlog.get_logger(__name__)


def deliver(event, render) -> dict | None:
    """Render and send one notification. Never raises."""
    order_id = str(event.order_id)
    if not event.contact_email:
        logger.info("No contact email on order, notification skipped", order_id=order_id)
        return None

    try:
        message = render(event)
        result = get_notifier().send(
            to=event.contact_email,
            subject=message["subject"],
            body=message["body"],
        )
    except Exception as exc:
        logger.error(
            "Notification dispatch raised",
            order_id=order_id,
            event_type=type(event).__name__,
            error=str(exc),
        )
        return None

    if result.get("status") != "sent":
        logger.warning(
            "Notification delivery failed",
            order_id=order_id,
            event_type=type(event).__name__,
            error=result.get("error"),
        )
    else:
        logger.info(
            "Notification sent",
            order_id=order_id,
            event_type=type(event).__name__,
            message_id=result.get("message_id"),
        )
    return result


@purchasing.event_handler(part_of=Order)
class OrderNotificationHandler:
    """Sends buyer-facing messages as orders move through their lifecycle."""

    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        deliver(event, templates.order_placed)

    @handle(OrderCompleted)
    def on_order_completed(self, event: OrderCompleted) -> None:
        deliver(event, templates.order_completed)

    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        deliver(event, templates.order_cancelled)

    @handle(OrderRefunded)
    def on_order_refunded(self, event: OrderRefunded) -> None:
        deliver(event, templates.order_refunded)
