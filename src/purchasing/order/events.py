"""Domain events for the Order aggregate.

Raised alongside every state change and consumed after commit by the
notification handler. Amounts are integer cents.
"""

from protean.fields import DateTime, Identifier, Integer, String

from purchasing.domain import purchasing


@purchasing.event(part_of="Order")
class OrderPlaced:
    """A buyer's cart was turned into a pending order."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    contact_email = String(required=True)
    subtotal_cents = Integer(required=True)
    tax_cents = Integer(required=True)
    total_cents = Integer(required=True)
    currency = String(default="USD")
    line_count = Integer(required=True)
    placed_at = DateTime(required=True)


@purchasing.event(part_of="Order")
class OrderTransitioned:
    """The order moved from one status to another."""

    __version__ = 1

    order_id = Identifier(required=True)
    from_status = String(required=True)
    to_status = String(required=True)
    transitioned_at = DateTime(required=True)


@purchasing.event(part_of="Order")
class PaymentAttached:
    """A verified payment reference was attached to the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_ref = String(required=True)
    payment_method = String()
    attached_at = DateTime(required=True)


@purchasing.event(part_of="Order")
class OrderCompleted:
    """All access for the order was granted."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    contact_email = String(required=True)
    total_cents = Integer(required=True)
    completed_at = DateTime(required=True)


@purchasing.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled before any access was granted."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    contact_email = String(required=True)
    reason = String()
    cancelled_at = DateTime(required=True)


@purchasing.event(part_of="Order")
class OrderRefunded:
    """The order was refunded and all granted access revoked."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    contact_email = String(required=True)
    total_cents = Integer(required=True)
    reason = String()
    refunded_at = DateTime(required=True)
