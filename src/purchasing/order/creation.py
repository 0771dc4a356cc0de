"""Order placement — command and handler.

Turns a cart snapshot into a pending order. Every check runs before anything
is written, and the order, its lines and the event seat reservations are
persisted in the handler's unit of work.
"""

import json
from collections import defaultdict

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from purchasing.buyer.buyer import Buyer
from purchasing.catalog.lookup import catalog_repository, load_product
from purchasing.catalog.types import ProductType
from purchasing.domain import purchasing
from purchasing.order.order import Order
from purchasing.pricing import to_cents

logger = structlog.get_logger(__name__)


@purchasing.command(part_of="Order")
class PlaceOrder:
    buyer_id = Identifier(required=True)
    contact_email = String(required=True, max_length=254)
    lines = Text(required=True)  # JSON: list of {product_type, product_id, quantity, unit_price}


def _parse_cart(raw_lines):
    """Normalize cart lines and reject empty carts, non-positive quantities and unpriced lines."""
    cart = json.loads(raw_lines) if isinstance(raw_lines, str) else raw_lines
    if not cart:
        raise ValidationError({"lines": ["Cart is empty"]})

    parsed = []
    for index, line in enumerate(cart):
        try:
            product_type = ProductType(line.get("product_type"))
        except ValueError as exc:
            raise ValidationError({"lines": [f"Line {index}: unknown product type {line.get('product_type')!r}"]}) from exc

        quantity = line.get("quantity")
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
            raise ValidationError({"lines": [f"Line {index}: quantity must be a positive integer"]})

        if not line.get("product_id"):
            raise ValidationError({"lines": [f"Line {index}: product_id is required"]})

        if line.get("unit_price") in (None, ""):
            raise ValidationError({"lines": [f"Line {index}: unit_price is required"]})

        parsed.append(
            {
                "product_type": product_type,
                "product_id": str(line["product_id"]),
                "quantity": quantity,
                "unit_price_cents": to_cents(line["unit_price"]),
            }
        )
    return parsed


@purchasing.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart = _parse_cart(command.lines)

        buyer = current_domain.repository_for(Buyer).get(command.buyer_id)
        if not buyer.is_active:
            raise ObjectNotFoundError({"buyer_id": [f"Buyer {command.buyer_id} is not active"]})

        products = [load_product(line["product_type"], line["product_id"]) for line in cart]

        lines_data = []
        seats_requested = defaultdict(int)
        for line, product in zip(cart, products, strict=True):
            if not product.is_purchasable:
                raise ValidationError(
                    {"lines": [f"{line['product_type'].value} {line['product_id']} is not available for purchase"]}
                )
            if line["product_type"] == ProductType.EVENT:
                seats_requested[line["product_id"]] += line["quantity"]

            lines_data.append(
                {
                    "product_type": line["product_type"].value,
                    "product_id": line["product_id"],
                    "quantity": line["quantity"],
                    "unit_price_cents": line["unit_price_cents"],
                    "title": product.title,
                }
            )

        event_repo = catalog_repository(ProductType.EVENT)
        for event_id, quantity in seats_requested.items():
            event = event_repo.get(event_id)
            event.reserve(quantity)
            event_repo.add(event)

        order = Order.place(
            buyer_id=command.buyer_id,
            contact_email=command.contact_email,
            lines_data=lines_data,
        )
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            buyer_id=str(command.buyer_id),
            line_count=len(lines_data),
            total_cents=order.total_cents,
        )
        return str(order.id)
