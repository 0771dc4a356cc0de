"""Order payment — commands and handler.

Payment is verified upstream. Purchasing only records the processor's
reference and reacts to its capture confirmation:
    AttachPayment   pending -> payment_pending (idempotent per reference)
    ConfirmPayment  payment_pending -> paid
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from purchasing.domain import purchasing
from purchasing.errors import ConflictError
from purchasing.order.order import Order

logger = structlog.get_logger(__name__)


@purchasing.command(part_of="Order")
class AttachPayment:
    order_id = Identifier(required=True)
    payment_ref = String(required=True, max_length=255)
    payment_method = String(max_length=50)


@purchasing.command(part_of="Order")
class ConfirmPayment:
    order_id = Identifier(required=True)
    payment_ref = String(required=True, max_length=255)


@purchasing.command_handler(part_of=Order)
class PaymentHandler:
    @handle(AttachPayment)
    def attach_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        # The unique payment_ref column settles concurrent attaches at commit
        if order.payment_ref != command.payment_ref:
            claimed = repo._dao.query.filter(payment_ref=command.payment_ref).all().items
            if any(str(other.id) != str(order.id) for other in claimed):
                raise ConflictError(f"Payment reference {command.payment_ref} is already attached to another order")

        if order.attach_payment(command.payment_ref, command.payment_method):
            repo.add(order)
            logger.info(
                "Payment attached to order",
                order_id=str(order.id),
                payment_ref=command.payment_ref,
            )

    @handle(ConfirmPayment)
    def confirm_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if order.confirm_payment(command.payment_ref):
            repo.add(order)
            logger.info("Payment confirmed", order_id=str(order.id))
