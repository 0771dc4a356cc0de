"""Order cancellation and refund — commands and handler.

Cancellation happens before payment, so it only hands back event seat
reservations. Refund happens after fulfillment and reverses every grant the
order made, in the same unit of work as the status change.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from purchasing.access.handlers import revoke_order_access
from purchasing.domain import purchasing
from purchasing.order.order import Order
from purchasing.order.transition import release_event_reservations

logger = structlog.get_logger(__name__)


@purchasing.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = String(max_length=500)


@purchasing.command(part_of="Order")
class RefundOrder:
    order_id = Identifier(required=True)
    reason = String(max_length=500)


@purchasing.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.cancel(reason=command.reason)
        release_event_reservations(order)
        repo.add(order)
        logger.info("Order cancelled", order_id=str(order.id), reason=command.reason)

    @handle(RefundOrder)
    def refund_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.refund(reason=command.reason)
        revoke_order_access(order)
        repo.add(order)
        logger.info("Order refunded", order_id=str(order.id), reason=command.reason)
