"""FastAPI endpoints for the Purchasing domain.

The identity provider sits in front of this API and forwards who is calling
in the ``X-Buyer-Id`` and ``X-Buyer-Role`` headers.
"""

from datetime import datetime

from fastapi import APIRouter, Header

from purchasing import service
from purchasing.api.schemas import (
    AttachPaymentRequest,
    ConfirmPaymentRequest,
    DownloadGrantResponse,
    OrderPageResponse,
    OrderResponse,
    OrderStatsResponse,
    PlaceOrderRequest,
    ReasonRequest,
    StatusResponse,
    TransitionRequest,
)
from purchasing.buyer.buyer import BuyerRole
from purchasing.errors import AuthorizationError

order_router = APIRouter(prefix="/orders", tags=["orders"])
download_router = APIRouter(prefix="/downloads", tags=["downloads"])


def _is_admin(role: str | None) -> bool:
    return (role or "").lower() == BuyerRole.ADMIN.value


def _require_admin(buyer_id: str, role: str | None) -> None:
    if not _is_admin(role):
        raise AuthorizationError(f"Requester {buyer_id} is not an administrator")


# --- Buyer endpoints ---


@order_router.post("", status_code=201, response_model=OrderResponse)
async def place_order(
    body: PlaceOrderRequest,
    x_buyer_id: str = Header(...),
) -> OrderResponse:
    order = service.place_order(
        buyer_id=x_buyer_id,
        lines=[line.model_dump() for line in body.lines],
        contact_email=body.contact_email,
    )
    return OrderResponse.from_order(order)


@order_router.get("", response_model=OrderPageResponse)
async def list_orders(
    status: str | None = None,
    page: int = 1,
    page_size: int = 20,
    x_buyer_id: str = Header(...),
) -> OrderPageResponse:
    result = service.list_orders(x_buyer_id, status=status, page=page, page_size=page_size)
    return OrderPageResponse(
        items=[OrderResponse.from_order(order) for order in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        pages=result.pages,
    )


# --- Admin reporting endpoints (declared before /{order_id}) ---


@order_router.get("/search", response_model=list[OrderResponse])
async def search_orders(
    q: str | None = None,
    status: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    product_type: str | None = None,
    limit: int = 50,
    x_buyer_id: str = Header(...),
    x_buyer_role: str | None = Header(None),
) -> list[OrderResponse]:
    _require_admin(x_buyer_id, x_buyer_role)
    orders = service.search(
        query=q,
        status=status,
        start=start,
        end=end,
        product_type=product_type,
        limit=limit,
    )
    return [OrderResponse.from_order(order) for order in orders]


@order_router.get("/stats", response_model=OrderStatsResponse)
async def order_stats(
    start: datetime | None = None,
    end: datetime | None = None,
    x_buyer_id: str = Header(...),
    x_buyer_role: str | None = Header(None),
) -> OrderStatsResponse:
    _require_admin(x_buyer_id, x_buyer_role)
    return OrderStatsResponse.from_stats(service.stats(start=start, end=end))


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    x_buyer_id: str = Header(...),
    x_buyer_role: str | None = Header(None),
) -> OrderResponse:
    order = service.get_order(order_id, x_buyer_id, _is_admin(x_buyer_role))
    return OrderResponse.from_order(order)


@order_router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str,
    body: ReasonRequest,
    x_buyer_id: str = Header(...),
    x_buyer_role: str | None = Header(None),
) -> OrderResponse:
    # Ownership check; raises for anyone but the buyer or an admin
    service.get_order(order_id, x_buyer_id, _is_admin(x_buyer_role))
    return OrderResponse.from_order(service.cancel(order_id, reason=body.reason))


# --- Operator endpoints ---


@order_router.post("/{order_id}/transition", response_model=OrderResponse)
async def transition_order(
    order_id: str,
    body: TransitionRequest,
    x_buyer_id: str = Header(...),
    x_buyer_role: str | None = Header(None),
) -> OrderResponse:
    _require_admin(x_buyer_id, x_buyer_role)
    return OrderResponse.from_order(service.transition(order_id, body.target_status))


@order_router.post("/{order_id}/payment", response_model=OrderResponse)
async def attach_payment(
    order_id: str,
    body: AttachPaymentRequest,
    x_buyer_id: str = Header(...),
    x_buyer_role: str | None = Header(None),
) -> OrderResponse:
    _require_admin(x_buyer_id, x_buyer_role)
    order = service.attach_payment(order_id, body.payment_ref, body.payment_method)
    return OrderResponse.from_order(order)


@order_router.post("/{order_id}/payment/confirm", response_model=OrderResponse)
async def confirm_payment(
    order_id: str,
    body: ConfirmPaymentRequest,
    x_buyer_id: str = Header(...),
    x_buyer_role: str | None = Header(None),
) -> OrderResponse:
    _require_admin(x_buyer_id, x_buyer_role)
    return OrderResponse.from_order(service.confirm_payment(order_id, body.payment_ref))


@order_router.post("/{order_id}/fulfill", response_model=StatusResponse)
async def fulfill_order(
    order_id: str,
    x_buyer_id: str = Header(...),
    x_buyer_role: str | None = Header(None),
) -> StatusResponse:
    _require_admin(x_buyer_id, x_buyer_role)
    service.fulfill(order_id)
    return StatusResponse()


@order_router.post("/{order_id}/refund", response_model=OrderResponse)
async def refund_order(
    order_id: str,
    body: ReasonRequest,
    x_buyer_id: str = Header(...),
    x_buyer_role: str | None = Header(None),
) -> OrderResponse:
    _require_admin(x_buyer_id, x_buyer_role)
    return OrderResponse.from_order(service.refund(order_id, reason=body.reason))


# --- Downloads ---


@download_router.post("/{grant_id}", response_model=DownloadGrantResponse)
async def record_download(
    grant_id: str,
    x_buyer_id: str = Header(...),
) -> DownloadGrantResponse:
    return DownloadGrantResponse.from_grant(service.record_download(grant_id, x_buyer_id))
