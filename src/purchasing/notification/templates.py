"""Message templates for order notifications."""

from purchasing.pricing import to_decimal


def order_placed(event) -> dict:
    return {
        "subject": f"Order #{event.order_id} received",
        "body": (
            f"We received your order #{event.order_id}.\n\n"
            f"Order Total: {event.currency or 'USD'} {to_decimal(event.total_cents)}\n\n"
            "Your access will be ready as soon as payment is confirmed."
        ),
    }


def order_completed(event) -> dict:
    return {
        "subject": f"Order #{event.order_id} is ready",
        "body": (
            f"Payment for order #{event.order_id} is confirmed and your purchases are now available.\n\n"
            "Courses appear in your library, event tickets in your bookings and downloads on your account page."
        ),
    }


def order_cancelled(event) -> dict:
    reason = f"\n\nReason: {event.reason}" if event.reason else ""
    return {
        "subject": f"Order #{event.order_id} cancelled",
        "body": f"Your order #{event.order_id} has been cancelled.{reason}",
    }


def order_refunded(event) -> dict:
    return {
        "subject": f"Refund for order #{event.order_id}",
        "body": (
            f"A refund of {to_decimal(event.total_cents)} has been issued for order #{event.order_id}.\n\n"
            "Access granted by this order has been withdrawn."
        ),
    }
