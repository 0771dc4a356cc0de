"""Pydantic request/response schemas for the Purchasing API."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from purchasing.pricing import to_decimal

# --- Request Schemas ---


class CartLineRequest(BaseModel):
    product_type: str = Field(..., max_length=20)
    product_id: str
    quantity: int
    unit_price: Decimal


class PlaceOrderRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "contact_email": "ada@example.com",
                    "lines": [
                        {
                            "product_type": "course",
                            "product_id": "a1b2c3d4-e5f6-7890-abcd-ef1234567890",
                            "quantity": 1,
                            "unit_price": "50.00",
                        },
                        {
                            "product_type": "event",
                            "product_id": "b2c3d4e5-f6a7-8901-bcde-f12345678901",
                            "quantity": 2,
                            "unit_price": "30.00",
                        },
                    ],
                }
            ]
        }
    }

    contact_email: str = Field(..., max_length=254)
    lines: list[CartLineRequest]


class TransitionRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"target_status": "payment_pending"}]}}

    target_status: str = Field(..., max_length=20)


class AttachPaymentRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"payment_ref": "pay_1", "payment_method": "card"}]}}

    payment_ref: str = Field(..., max_length=255)
    payment_method: str | None = Field(None, max_length=50)


class ConfirmPaymentRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"payment_ref": "pay_1"}]}}

    payment_ref: str = Field(..., max_length=255)


class ReasonRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"reason": "Changed my mind"}]}}

    reason: str | None = Field(None, max_length=500)


# --- Response Schemas ---


class OrderLineResponse(BaseModel):
    product_type: str
    product_id: str
    title: str
    quantity: int
    unit_price: str
    line_total: str


class OrderResponse(BaseModel):
    order_id: str
    buyer_id: str
    contact_email: str
    status: str
    currency: str
    subtotal: str
    tax: str
    total: str
    payment_ref: str | None = None
    payment_method: str | None = None
    cancellation_reason: str | None = None
    refund_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None
    lines: list[OrderLineResponse] = []

    @classmethod
    def from_order(cls, order) -> OrderResponse:
        return cls(
            order_id=str(order.id),
            buyer_id=str(order.buyer_id),
            contact_email=order.contact_email,
            status=order.status,
            currency=order.currency or "USD",
            subtotal=str(to_decimal(order.subtotal_cents)),
            tax=str(to_decimal(order.tax_cents)),
            total=str(to_decimal(order.total_cents)),
            payment_ref=order.payment_ref,
            payment_method=order.payment_method,
            cancellation_reason=order.cancellation_reason,
            refund_reason=order.refund_reason,
            created_at=order.created_at,
            updated_at=order.updated_at,
            completed_at=order.completed_at,
            lines=[
                OrderLineResponse(
                    product_type=line.product_type,
                    product_id=str(line.product_id),
                    title=line.title,
                    quantity=line.quantity,
                    unit_price=str(to_decimal(line.unit_price_cents)),
                    line_total=str(to_decimal(line.line_total_cents)),
                )
                for line in order.lines
            ],
        )


class OrderPageResponse(BaseModel):
    items: list[OrderResponse]
    total: int
    page: int
    page_size: int
    pages: int


class TopLineResponse(BaseModel):
    product_type: str
    product_id: str
    title: str
    quantity: int
    revenue: str


class OrderStatsResponse(BaseModel):
    total_revenue: str
    order_count: int
    average_order_value: str
    orders_by_status: dict[str, int]
    top_lines: list[TopLineResponse]

    @classmethod
    def from_stats(cls, stats) -> OrderStatsResponse:
        return cls(
            total_revenue=str(stats.total_revenue),
            order_count=stats.order_count,
            average_order_value=str(stats.average_order_value),
            orders_by_status=stats.orders_by_status,
            top_lines=[
                TopLineResponse(
                    product_type=line.product_type,
                    product_id=line.product_id,
                    title=line.title,
                    quantity=line.quantity,
                    revenue=str(line.revenue),
                )
                for line in stats.top_lines
            ],
        )


class DownloadGrantResponse(BaseModel):
    grant_id: str
    product_id: str
    order_id: str
    status: str
    downloads_used: int
    download_limit: int

    @classmethod
    def from_grant(cls, grant) -> DownloadGrantResponse:
        return cls(
            grant_id=str(grant.id),
            product_id=str(grant.product_id),
            order_id=str(grant.order_id),
            status=grant.status,
            downloads_used=grant.downloads_used or 0,
            download_limit=grant.download_limit,
        )


class StatusResponse(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"status": "ok"}]}}

    status: str = "ok"
