"""Generic status transition — command and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from purchasing.catalog.lookup import catalog_repository
from purchasing.catalog.types import ProductType
from purchasing.domain import purchasing
from purchasing.order.order import Order, OrderStatus

# Entering these states grants or revokes access, so only FulfillOrder and
# RefundOrder may reach them.
_RESERVED_TARGETS = {OrderStatus.COMPLETED, OrderStatus.REFUNDED}


@purchasing.command(part_of="Order")
class TransitionOrder:
    order_id = Identifier(required=True)
    target_status = String(required=True, choices=OrderStatus)


def release_event_reservations(order):
    """Hand back the seats an unfulfilled order was holding."""
    event_repo = catalog_repository(ProductType.EVENT)
    for line in order.lines_of_type(ProductType.EVENT):
        event = event_repo.get(line.product_id)
        event.release_reservation(line.quantity)
        event_repo.add(event)


@purchasing.command_handler(part_of=Order)
class TransitionOrderHandler:
    @handle(TransitionOrder)
    def transition_order(self, command):
        target = OrderStatus(command.target_status)
        if target in _RESERVED_TARGETS:
            raise ValidationError({"status": [f"Use the dedicated operation to move an order to {target.value}"]})

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        order.transition_to(target)
        # Seats are only booked on completion, so any cancellation still holds a reservation
        if target == OrderStatus.CANCELLED:
            release_event_reservations(order)

        repo.add(order)
