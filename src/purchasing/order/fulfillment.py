"""Order fulfillment — command and handler.

Grants the access every line paid for and completes the order inside one
unit of work. A failure in any grant leaves the order, the access records
and the catalog counters exactly as they were.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from purchasing.access.handlers import grant_order_access
from purchasing.domain import purchasing
from purchasing.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)


@purchasing.command(part_of="Order")
class FulfillOrder:
    order_id = Identifier(required=True)


@purchasing.command_handler(part_of=Order)
class FulfillOrderHandler:
    @handle(FulfillOrder)
    def fulfill_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        if order.status == OrderStatus.COMPLETED.value:
            logger.info("Order already fulfilled", order_id=str(order.id))
            return

        # Raises before any grant when the order is not paid
        order.complete()
        grant_order_access(order)
        repo.add(order)
