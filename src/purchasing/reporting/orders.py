"""Order reads — single order, buyer history and search.

Reads go straight to the Order repository; nothing here writes. Ownership is
checked against the requester identity passed in by the caller.
"""

import math
from dataclasses import dataclass, field
from datetime import UTC

from protean.utils.globals import current_domain

from purchasing.catalog.types import ProductType
from purchasing.errors import AuthorizationError
from purchasing.order.order import Order, OrderStatus

SEARCH_LIMIT = 50
_SCAN_BATCH = 100


@dataclass(frozen=True)
class Page:
    """One page of results plus what is needed to render pagination."""

    items: list = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 20
    pages: int = 0


def _aware(value):
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def in_range(order, start=None, end=None):
    """True when the order was created within ``[start, end]``."""
    created = _aware(order.created_at)
    if start is not None and (created is None or created < _aware(start)):
        return False
    if end is not None and (created is None or created > _aware(end)):
        return False
    return True


def scan_orders(**filters):
    """Yield every order matching ``filters``, newest first, one batch at a time."""
    query = current_domain.repository_for(Order)._dao.query
    if filters:
        query = query.filter(**filters)
    query = query.order_by("-created_at")

    offset = 0
    while True:
        batch = query.offset(offset).limit(_SCAN_BATCH).all().items
        yield from batch
        if len(batch) < _SCAN_BATCH:
            return
        offset += _SCAN_BATCH


def get_order(order_id, requester_id, requester_is_admin=False):
    """Return the order if the requester owns it or is an administrator."""
    order = current_domain.repository_for(Order).get(order_id)
    if not requester_is_admin and str(order.buyer_id) != str(requester_id):
        raise AuthorizationError(f"Requester {requester_id} may not view order {order_id}")
    return order


def list_orders(buyer_id, status=None, page=1, page_size=20):
    """Return a page of the buyer's orders, newest first."""
    page = max(int(page), 1)
    page_size = max(int(page_size), 1)

    filters = {"buyer_id": str(buyer_id)}
    if status:
        filters["status"] = OrderStatus(status).value

    result = (
        current_domain.repository_for(Order)
        ._dao.query.filter(**filters)
        .order_by("-created_at")
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return Page(
        items=list(result.items),
        total=result.total,
        page=page,
        page_size=page_size,
        pages=math.ceil(result.total / page_size) if result.total else 0,
    )


def search_orders(query=None, status=None, start=None, end=None, product_type=None, limit=SEARCH_LIMIT):
    """Find orders whose id or contact email contains ``query`` (case-insensitive).

    At most ``SEARCH_LIMIT`` orders are returned, newest first.
    """
    limit = min(max(int(limit), 0), SEARCH_LIMIT)
    if limit == 0:
        return []

    filters = {}
    if status:
        filters["status"] = OrderStatus(status).value
    needle = query.strip().lower() if query else ""
    wanted_type = ProductType(product_type).value if product_type else None

    matches = []
    for order in scan_orders(**filters):
        if not in_range(order, start, end):
            continue
        if needle and needle not in str(order.id).lower() and needle not in (order.contact_email or "").lower():
            continue
        if wanted_type and not any(line.product_type == wanted_type for line in order.lines):
            continue

        matches.append(order)
        if len(matches) >= limit:
            break
    return matches
