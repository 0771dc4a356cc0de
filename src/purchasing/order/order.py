"""Order aggregate (CQRS) — the core of the purchasing domain.

An Order is created once, with all of its lines, and afterwards only its
status, payment reference and timestamps change. Lines carry a price and
title snapshot so later catalog edits never rewrite order history.

State Machine:
    PENDING → PAYMENT_PENDING → PAID → PROCESSING → COMPLETED → REFUNDED
    CANCELLED (from PENDING, PAYMENT_PENDING, PAID, PROCESSING)
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from purchasing.catalog.types import ProductType
from purchasing.domain import purchasing
from purchasing.errors import ConflictError
from purchasing.order.events import (
    OrderCancelled,
    OrderCompleted,
    OrderPlaced,
    OrderRefunded,
    OrderTransitioned,
    PaymentAttached,
)
from purchasing.pricing import compute_totals


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PAYMENT_PENDING = "payment_pending"
    PAID = "paid"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


# State machine transition map
_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PAYMENT_PENDING, OrderStatus.CANCELLED},
    OrderStatus.PAYMENT_PENDING: {OrderStatus.PAID, OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: {OrderStatus.REFUNDED},
    OrderStatus.CANCELLED: set(),  # Terminal
    OrderStatus.REFUNDED: set(),  # Terminal
}

# States from which a buyer may cancel; nothing has been granted yet
_CANCELLABLE_STATES = {
    OrderStatus.PENDING,
    OrderStatus.PAYMENT_PENDING,
}

# States in which payment has been captured and fulfillment may run
_FULFILLABLE_STATES = {
    OrderStatus.PAID,
    OrderStatus.PROCESSING,
}


def allowed_transitions(status):
    """Return the set of statuses reachable in one step from ``status``."""
    return set(_TRANSITIONS[OrderStatus(status)])


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@purchasing.entity(part_of="Order")
class OrderLine:
    """One purchased item: a course, an event seat block or a digital good.

    The unit price and title are copied from the catalog when the order is
    placed and never change afterwards.
    """

    product_type = String(required=True, choices=ProductType)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price_cents = Integer(required=True, min_value=0)
    title = String(required=True, max_length=255)

    @property
    def line_total_cents(self):
        return self.unit_price_cents * self.quantity


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@purchasing.aggregate
class Order:
    buyer_id = Identifier(required=True)
    contact_email = String(required=True, max_length=254)
    status = String(
        choices=OrderStatus,
        default=OrderStatus.PENDING.value,
    )
    lines = HasMany(OrderLine)
    subtotal_cents = Integer(required=True, min_value=0)
    tax_cents = Integer(required=True, min_value=0)
    total_cents = Integer(required=True, min_value=0)
    currency = String(max_length=3, default="USD")
    payment_ref = String(max_length=255, unique=True)
    payment_method = String(max_length=50)
    cancellation_reason = String(max_length=500)
    refund_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()
    completed_at = DateTime()

    @invariant.post
    def total_must_equal_subtotal_plus_tax(self):
        if self.total_cents != self.subtotal_cents + self.tax_cents:
            raise ValidationError({"total": ["Total must equal subtotal plus tax"]})

    @invariant.post
    def subtotal_must_match_lines(self):
        if not self.lines:
            return
        if self.subtotal_cents != sum(line.line_total_cents for line in self.lines):
            raise ValidationError({"subtotal": ["Subtotal must equal the sum of line totals"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, buyer_id, contact_email, lines_data):
        """Create a pending order from validated cart lines.

        Args:
            buyer_id: The buyer placing the order.
            contact_email: Where order notifications are sent.
            lines_data: List of dicts with product_type, product_id,
                        quantity, unit_price_cents and title.
        """
        if not lines_data:
            raise ValidationError({"lines": ["Cart is empty"]})

        subtotal, tax, total = compute_totals((line["unit_price_cents"], line["quantity"]) for line in lines_data)
        now = datetime.now(UTC)

        order = cls(
            buyer_id=buyer_id,
            contact_email=contact_email,
            status=OrderStatus.PENDING.value,
            lines=[OrderLine(**line) for line in lines_data],
            subtotal_cents=subtotal,
            tax_cents=tax,
            total_cents=total,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                buyer_id=str(buyer_id),
                contact_email=contact_email,
                subtotal_cents=subtotal,
                tax_cents=tax,
                total_cents=total,
                currency=order.currency,
                line_count=len(lines_data),
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        """Validate that the current state allows transition to target."""
        current = OrderStatus(self.status)
        if target_status not in _TRANSITIONS[current]:
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def transition_to(self, target_status):
        """Move to ``target_status`` if the transition map allows it."""
        target = OrderStatus(target_status)
        self._assert_can_transition(target)

        previous = self.status
        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        if target == OrderStatus.COMPLETED and self.completed_at is None:
            self.completed_at = now

        self.raise_(
            OrderTransitioned(
                order_id=str(self.id),
                from_status=previous,
                to_status=target.value,
                transitioned_at=now,
            )
        )

    @property
    def is_fulfillable(self):
        return OrderStatus(self.status) in _FULFILLABLE_STATES

    @property
    def is_cancellable(self):
        return OrderStatus(self.status) in _CANCELLABLE_STATES

    def lines_of_type(self, product_type):
        product_type = ProductType(product_type)
        return [line for line in self.lines if line.product_type == product_type.value]

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def attach_payment(self, payment_ref, payment_method):
        """Attach a verified payment reference and move to PAYMENT_PENDING.

        Returns False when the same reference is already attached.
        """
        if self.payment_ref == payment_ref:
            return False
        if self.payment_ref:
            raise ConflictError(f"Order {self.id} already has payment reference {self.payment_ref}")

        self._assert_can_transition(OrderStatus.PAYMENT_PENDING)
        self.payment_ref = payment_ref
        self.payment_method = payment_method
        self.transition_to(OrderStatus.PAYMENT_PENDING)

        self.raise_(
            PaymentAttached(
                order_id=str(self.id),
                payment_ref=payment_ref,
                payment_method=payment_method,
                attached_at=self.updated_at,
            )
        )
        return True

    def confirm_payment(self, payment_ref):
        """Record that the processor captured the attached payment.

        Returns False when the order is already past payment.
        """
        if not self.payment_ref or self.payment_ref != payment_ref:
            raise ConflictError(f"Payment reference {payment_ref} does not match order {self.id}")

        if OrderStatus(self.status) in (OrderStatus.PAID, OrderStatus.PROCESSING, OrderStatus.COMPLETED):
            return False

        self.transition_to(OrderStatus.PAID)
        return True

    # -------------------------------------------------------------------
    # Fulfillment
    # -------------------------------------------------------------------
    def complete(self):
        """Mark all access as granted. Passes through PROCESSING when PAID."""
        if not self.is_fulfillable:
            raise ValidationError({"status": [f"Order must be paid before fulfillment, not {self.status}"]})

        if OrderStatus(self.status) == OrderStatus.PAID:
            self.transition_to(OrderStatus.PROCESSING)
        self.transition_to(OrderStatus.COMPLETED)

        self.raise_(
            OrderCompleted(
                order_id=str(self.id),
                buyer_id=str(self.buyer_id),
                contact_email=self.contact_email,
                total_cents=self.total_cents,
                completed_at=self.completed_at,
            )
        )

    # -------------------------------------------------------------------
    # Cancellation & Refund
    # -------------------------------------------------------------------
    def cancel(self, reason=None):
        """Cancel the order. Only allowed before payment is captured."""
        if not self.is_cancellable:
            raise ValidationError(
                {
                    "status": [
                        f"Cannot cancel order in {self.status} state. "
                        f"Cancellation is only allowed from: "
                        f"{', '.join(sorted(s.value for s in _CANCELLABLE_STATES))}"
                    ]
                }
            )

        self.cancellation_reason = reason
        self.transition_to(OrderStatus.CANCELLED)

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                buyer_id=str(self.buyer_id),
                contact_email=self.contact_email,
                reason=reason,
                cancelled_at=self.updated_at,
            )
        )

    def refund(self, reason=None):
        """Refund a completed order. Access reversal happens in the same unit of work."""
        if OrderStatus(self.status) != OrderStatus.COMPLETED:
            raise ValidationError({"status": [f"Only completed orders can be refunded, not {self.status}"]})

        self.refund_reason = reason
        self.transition_to(OrderStatus.REFUNDED)

        self.raise_(
            OrderRefunded(
                order_id=str(self.id),
                buyer_id=str(self.buyer_id),
                contact_email=self.contact_email,
                total_cents=self.total_cents,
                reason=reason,
                refunded_at=self.updated_at,
            )
        )
