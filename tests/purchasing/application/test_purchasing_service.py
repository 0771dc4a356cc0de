"""Application tests for the library entry points."""

from unittest.mock import MagicMock, patch

import pytest
from protean.exceptions import ExpectedVersionError, TransactionError, ValidationError
from protean.utils.globals import current_domain
from sqlalchemy.exc import IntegrityError, OperationalError

from purchasing import service
from purchasing.access.download_grant import DownloadGrant
from purchasing.errors import ConflictError, DatabaseError
from purchasing.order.order import OrderStatus


def _lines(shop):
    return [
        {
            "product_type": "event",
            "product_id": shop.register_event(capacity=10),
            "quantity": 1,
            "unit_price": "30.00",
        },
        {
            "product_type": "digital_good",
            "product_id": shop.register_digital_product(),
            "quantity": 1,
            "unit_price": "9.99",
        },
    ]


class TestOrderLifecycleThroughService:
    def test_full_lifecycle(self, shop, buyer_id):
        order = service.place_order(buyer_id, _lines(shop), "ada@example.com")
        assert order.status == OrderStatus.PENDING.value
        order_id = str(order.id)

        assert service.attach_payment(order_id, "pay_1", "card").status == OrderStatus.PAYMENT_PENDING.value
        assert service.attach_payment(order_id, "pay_1", "card").status == OrderStatus.PAYMENT_PENDING.value
        with pytest.raises(ConflictError):
            service.attach_payment(order_id, "pay_2", "card")

        assert service.confirm_payment(order_id, "pay_1").status == OrderStatus.PAID.value
        service.fulfill(order_id)
        assert service.get_order(order_id, buyer_id, False).status == OrderStatus.COMPLETED.value

        refunded = service.refund(order_id, reason="Duplicate purchase")
        assert refunded.status == OrderStatus.REFUNDED.value
        assert refunded.refund_reason == "Duplicate purchase"

    def test_transition_and_cancel(self, shop, buyer_id):
        order_id = str(service.place_order(buyer_id, _lines(shop), "ada@example.com").id)
        assert service.transition(order_id, "payment_pending").status == OrderStatus.PAYMENT_PENDING.value
        assert service.cancel(order_id, reason="No longer needed").status == OrderStatus.CANCELLED.value

    def test_record_download(self, shop, buyer_id):
        product_id = shop.register_digital_product()
        order = service.place_order(
            buyer_id,
            [{"product_type": "digital_good", "product_id": product_id, "quantity": 1, "unit_price": "9.99"}],
            "ada@example.com",
        )
        service.attach_payment(str(order.id), "pay_1")
        service.confirm_payment(str(order.id), "pay_1")
        service.fulfill(str(order.id))

        grant = current_domain.repository_for(DownloadGrant).find_by_order(order.id)[0]
        assert service.record_download(str(grant.id), buyer_id).downloads_used == 1

    def test_unpriced_line_is_rejected(self, shop, buyer_id):
        line = {"product_type": "course", "product_id": shop.register_course(), "quantity": 1}
        with pytest.raises(ValidationError):
            service.place_order(buyer_id, [line], "ada@example.com")
        assert service.list_orders(buyer_id).total == 0

    def test_reads(self, shop, buyer_id):
        service.place_order(buyer_id, _lines(shop), "ada@example.com")
        assert service.list_orders(buyer_id).total == 1
        assert len(service.search("ada@")) == 1
        assert service.stats().orders_by_status == {"pending": 1}


class TestDatabaseErrors:
    def test_store_failure_surfaces_as_database_error(self, buyer_id):
        with patch(
            "purchasing.reporting.orders.list_orders",
            side_effect=OperationalError("SELECT", {}, Exception("connection reset")),
        ):
            with pytest.raises(DatabaseError) as exc:
                service.list_orders(buyer_id)

        assert isinstance(exc.value.__cause__, OperationalError)

    def test_commit_failure_surfaces_as_database_error(self, buyer_id):
        failure = TransactionError("Unit of Work commit failed")
        failure.__cause__ = OperationalError("COMMIT", {}, Exception("server closed the connection"))
        with patch("purchasing.service.current_domain", new_callable=MagicMock) as domain:
            domain.process.side_effect = failure
            with pytest.raises(DatabaseError):
                service.cancel("order-1")


def _duplicate_key():
    return IntegrityError("UPDATE order", {}, Exception("duplicate key value violates unique constraint"))


class TestConcurrencyConflicts:
    def test_lost_race_on_event_counter_is_conflict(self, shop, buyer_id):
        lines = _lines(shop)
        with patch("purchasing.service.current_domain", new_callable=MagicMock) as domain:
            domain.process.side_effect = ExpectedVersionError("Wrong expected version: 1 (Event)")
            with pytest.raises(ConflictError) as exc:
                service.place_order(buyer_id, lines, "ada@example.com")

        assert isinstance(exc.value.__cause__, ExpectedVersionError)

    def test_duplicate_payment_ref_at_commit_is_conflict(self):
        failure = TransactionError("Unit of Work commit failed")
        failure.__cause__ = _duplicate_key()
        with patch("purchasing.service.current_domain", new_callable=MagicMock) as domain:
            domain.process.side_effect = failure
            with pytest.raises(ConflictError):
                service.attach_payment("order-1", "pay_1", "card")

    def test_duplicate_payment_ref_on_flush_is_conflict(self):
        with patch("purchasing.service.current_domain", new_callable=MagicMock) as domain:
            domain.process.side_effect = _duplicate_key()
            with pytest.raises(ConflictError):
                service.attach_payment("order-1", "pay_1", "card")
