"""Order statistics for the admin dashboard."""

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from purchasing.order.order import OrderStatus
from purchasing.pricing import to_decimal
from purchasing.reporting.orders import in_range, scan_orders

# Orders whose payment has been captured and not given back
REVENUE_STATUSES = {
    OrderStatus.PAID.value,
    OrderStatus.PROCESSING.value,
    OrderStatus.COMPLETED.value,
}

TOP_LINES = 10


@dataclass(frozen=True)
class TopLine:
    product_type: str
    product_id: str
    title: str
    quantity: int
    revenue: Decimal


@dataclass(frozen=True)
class OrderStats:
    total_revenue: Decimal = Decimal("0.00")
    order_count: int = 0
    average_order_value: Decimal = Decimal("0.00")
    orders_by_status: dict = field(default_factory=dict)
    top_lines: list = field(default_factory=list)


def order_stats(start=None, end=None) -> OrderStats:
    """Aggregate revenue, status counts and best-selling lines.

    Revenue, order count, average and top lines only consider orders in
    ``REVENUE_STATUSES``; the status breakdown covers every order.
    """
    by_status = Counter()
    revenue_cents = 0
    revenue_orders = 0
    line_quantity = defaultdict(int)
    line_revenue = defaultdict(int)
    line_title = {}

    for order in scan_orders():
        if not in_range(order, start, end):
            continue

        by_status[order.status] += 1
        if order.status not in REVENUE_STATUSES:
            continue

        revenue_cents += order.total_cents
        revenue_orders += 1
        for line in order.lines:
            key = (line.product_type, str(line.product_id))
            line_quantity[key] += line.quantity
            line_revenue[key] += line.line_total_cents
            line_title.setdefault(key, line.title)

    average = Decimal("0.00")
    if revenue_orders:
        average = (to_decimal(revenue_cents) / revenue_orders).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    ranked = sorted(line_revenue, key=lambda key: (-line_revenue[key], key))[:TOP_LINES]
    top_lines = [
        TopLine(
            product_type=product_type,
            product_id=product_id,
            title=line_title[(product_type, product_id)],
            quantity=line_quantity[(product_type, product_id)],
            revenue=to_decimal(line_revenue[(product_type, product_id)]),
        )
        for product_type, product_id in ranked
    ]

    return OrderStats(
        total_revenue=to_decimal(revenue_cents),
        order_count=revenue_orders,
        average_order_value=average,
        orders_by_status=dict(by_status),
        top_lines=top_lines,
    )
