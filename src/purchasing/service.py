"""Library entry points for the purchasing core.

Each function runs against the current domain context, routes writes through
a command (one unit of work per call) and returns the hydrated record. A
lost optimistic-lock race or a unique-constraint violation surfaces as
``ConflictError``; any other store failure as ``DatabaseError``.
"""

import functools
import json

from protean.exceptions import ExpectedVersionError, TransactionError
from protean.utils.globals import current_domain
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from purchasing.access.download import RecordDownload
from purchasing.access.download_grant import DownloadGrant
from purchasing.errors import ConflictError, DatabaseError
from purchasing.order.cancellation import CancelOrder, RefundOrder
from purchasing.order.creation import PlaceOrder
from purchasing.order.fulfillment import FulfillOrder
from purchasing.order.order import Order
from purchasing.order.payment import AttachPayment, ConfirmPayment
from purchasing.order.transition import TransitionOrder
from purchasing.reporting import orders as order_reads
from purchasing.reporting.stats import order_stats


def _guard_database(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ExpectedVersionError as exc:
            raise ConflictError(f"{func.__name__} lost a concurrent update, retry the request") from exc
        except IntegrityError as exc:
            raise ConflictError(f"{func.__name__} violates a uniqueness constraint: {exc.orig}") from exc
        except TransactionError as exc:
            # Commit failures arrive wrapped; the driver error is the cause
            if isinstance(exc.__cause__, IntegrityError):
                raise ConflictError(f"{func.__name__} violates a uniqueness constraint: {exc.__cause__.orig}") from exc
            raise DatabaseError(f"{func.__name__} failed: {exc}") from exc
        except SQLAlchemyError as exc:
            raise DatabaseError(f"{func.__name__} failed: {exc}") from exc

    return wrapper


def _load_order(order_id):
    return current_domain.repository_for(Order).get(order_id)


@_guard_database
def place_order(buyer_id, lines, contact_email) -> Order:
    """Create a pending order from cart lines.

    ``lines`` is a list of dicts with ``product_type``, ``product_id``,
    ``quantity`` and ``unit_price`` (major units, price at add-to-cart time).
    """
    order_id = current_domain.process(
        PlaceOrder(
            buyer_id=buyer_id,
            contact_email=contact_email,
            lines=json.dumps(lines, default=str),
        ),
        asynchronous=False,
    )
    return _load_order(order_id)


@_guard_database
def get_order(order_id, requester_id, requester_is_admin=False) -> Order:
    return order_reads.get_order(order_id, requester_id, requester_is_admin)


@_guard_database
def list_orders(buyer_id, status=None, page=1, page_size=20) -> order_reads.Page:
    return order_reads.list_orders(buyer_id, status=status, page=page, page_size=page_size)


@_guard_database
def transition(order_id, target_status) -> Order:
    current_domain.process(TransitionOrder(order_id=order_id, target_status=target_status), asynchronous=False)
    return _load_order(order_id)


@_guard_database
def attach_payment(order_id, payment_ref, method=None) -> Order:
    current_domain.process(
        AttachPayment(order_id=order_id, payment_ref=payment_ref, payment_method=method),
        asynchronous=False,
    )
    return _load_order(order_id)


@_guard_database
def confirm_payment(order_id, payment_ref) -> Order:
    current_domain.process(ConfirmPayment(order_id=order_id, payment_ref=payment_ref), asynchronous=False)
    return _load_order(order_id)


@_guard_database
def fulfill(order_id) -> None:
    current_domain.process(FulfillOrder(order_id=order_id), asynchronous=False)


@_guard_database
def cancel(order_id, reason=None) -> Order:
    current_domain.process(CancelOrder(order_id=order_id, reason=reason), asynchronous=False)
    return _load_order(order_id)


@_guard_database
def refund(order_id, reason=None) -> Order:
    current_domain.process(RefundOrder(order_id=order_id, reason=reason), asynchronous=False)
    return _load_order(order_id)


@_guard_database
def record_download(grant_id, buyer_id) -> DownloadGrant:
    current_domain.process(RecordDownload(grant_id=grant_id, buyer_id=buyer_id), asynchronous=False)
    return current_domain.repository_for(DownloadGrant).get(grant_id)


@_guard_database
def stats(start=None, end=None):
    return order_stats(start=start, end=end)


@_guard_database
def search(query=None, status=None, start=None, end=None, product_type=None, limit=order_reads.SEARCH_LIMIT):
    return order_reads.search_orders(
        query=query,
        status=status,
        start=start,
        end=end,
        product_type=product_type,
        limit=limit,
    )
