"""Application tests for PlaceOrder."""

import json
from datetime import UTC, datetime, timedelta

import pytest
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from purchasing.buyer.registration import DeactivateBuyer
from purchasing.catalog.event import Event
from purchasing.catalog.registration import ChangeAvailability
from purchasing.errors import ConflictError
from purchasing.order.creation import PlaceOrder
from purchasing.order.order import Order, OrderStatus


class TestPlaceOrder:
    def test_mixed_cart_is_persisted_with_totals(self, shop, buyer_id, monkeypatch):
        monkeypatch.delenv("PURCHASING_TAX_RATE", raising=False)
        course_id = shop.register_course(price="50.00")
        event_id = shop.register_event(price="30.00", capacity=10)

        order_id = shop.place(
            buyer_id,
            [
                shop.line("course", course_id, 1, "50.00"),
                shop.line("event", event_id, 2, "30.00"),
            ],
        )

        order = current_domain.repository_for(Order).get(order_id)
        assert order.status == OrderStatus.PENDING.value
        assert order.subtotal_cents == 11000
        assert order.tax_cents == 880
        assert order.total_cents == 11880
        assert len(order.lines) == 2

    def test_lines_snapshot_price_and_title(self, shop, buyer_id):
        course_id = shop.register_course(title="Intro to Python", price="50.00")
        order_id = shop.place(buyer_id, [shop.line("course", course_id, 1, "45.00")])

        line = current_domain.repository_for(Order).get(order_id).lines[0]
        assert line.unit_price_cents == 4500
        assert line.title == "Intro to Python"
        assert line.product_type == "course"

    def test_event_seats_are_reserved(self, shop, buyer_id):
        event_id = shop.register_event(capacity=10)
        shop.place(buyer_id, [shop.line("event", event_id, 3, "30.00")])

        event = current_domain.repository_for(Event).get(event_id)
        assert event.reserved_spots == 3
        assert event.available_spots == 10

    def test_process_returns_order_id(self, shop, buyer_id):
        course_id = shop.register_course()
        order_id = current_domain.process(
            PlaceOrder(
                buyer_id=buyer_id,
                contact_email="ada@example.com",
                lines=json.dumps([shop.line("course", course_id)]),
            ),
            asynchronous=False,
        )
        assert str(current_domain.repository_for(Order).get(order_id).id) == order_id


class TestPlaceOrderValidation:
    def _order_count(self):
        return current_domain.repository_for(Order)._dao.query.all().total

    def test_empty_cart(self, shop, buyer_id):
        with pytest.raises(ValidationError):
            shop.place(buyer_id, [])
        assert self._order_count() == 0

    def test_non_positive_quantity(self, shop, buyer_id):
        course_id = shop.register_course()
        with pytest.raises(ValidationError):
            shop.place(buyer_id, [shop.line("course", course_id, 0)])
        assert self._order_count() == 0

    @pytest.mark.parametrize("unit_price", [None, ""])
    def test_line_without_price(self, shop, buyer_id, unit_price):
        line = shop.line("course", shop.register_course())
        line["unit_price"] = unit_price
        with pytest.raises(ValidationError) as exc:
            shop.place(buyer_id, [line])

        assert exc.value.messages == {"lines": ["Line 0: unit_price is required"]}
        assert self._order_count() == 0

    def test_line_with_price_omitted(self, shop, buyer_id):
        line = shop.line("course", shop.register_course())
        del line["unit_price"]
        with pytest.raises(ValidationError):
            shop.place(buyer_id, [line])
        assert self._order_count() == 0

    def test_unknown_product_type(self, shop, buyer_id):
        with pytest.raises(ValidationError):
            shop.place(buyer_id, [shop.line("bundle", "x-1")])

    def test_unknown_buyer(self, shop):
        course_id = shop.register_course()
        with pytest.raises(ObjectNotFoundError):
            shop.place("ghost-buyer", [shop.line("course", course_id)])
        assert self._order_count() == 0

    def test_inactive_buyer(self, shop, buyer_id):
        course_id = shop.register_course()
        current_domain.process(DeactivateBuyer(buyer_id=buyer_id), asynchronous=False)
        with pytest.raises(ObjectNotFoundError):
            shop.place(buyer_id, [shop.line("course", course_id)])

    def test_missing_product(self, shop, buyer_id):
        with pytest.raises(ObjectNotFoundError):
            shop.place(buyer_id, [shop.line("course", "no-such-course")])
        assert self._order_count() == 0

    def test_unpublished_product(self, shop, buyer_id):
        product_id = shop.register_digital_product()
        current_domain.process(
            ChangeAvailability(product_type="digital_good", product_id=product_id, is_published=False),
            asynchronous=False,
        )
        with pytest.raises(ValidationError):
            shop.place(buyer_id, [shop.line("digital_good", product_id, 1, "9.99")])
        assert self._order_count() == 0

    def test_event_already_started(self, shop, buyer_id):
        event_id = shop.register_event(starts_at=datetime.now(UTC) - timedelta(hours=1))
        with pytest.raises(ValidationError):
            shop.place(buyer_id, [shop.line("event", event_id, 1, "30.00")])

    def test_insufficient_capacity_rolls_back(self, shop, buyer_id):
        course_id = shop.register_course()
        event_id = shop.register_event(capacity=1)

        with pytest.raises(ConflictError):
            shop.place(
                buyer_id,
                [shop.line("course", course_id), shop.line("event", event_id, 2, "30.00")],
            )

        assert self._order_count() == 0
        assert current_domain.repository_for(Event).get(event_id).reserved_spots == 0


class TestCapacityBound:
    def test_sequential_orders_never_exceed_capacity(self, shop, buyer_id):
        event_id = shop.register_event(capacity=3)

        accepted, rejected = 0, 0
        for _ in range(5):
            try:
                shop.place(buyer_id, [shop.line("event", event_id, 1, "30.00")])
                accepted += 1
            except ConflictError:
                rejected += 1

        assert accepted == 3
        assert rejected == 2
        assert current_domain.repository_for(Event).get(event_id).reserved_spots == 3

    def test_stale_event_write_is_rejected(self, shop):
        event_id = shop.register_event(capacity=3)
        repo = current_domain.repository_for(Event)
        first, second = repo.get(event_id), repo.get(event_id)

        first.reserve(1)
        repo.add(first)
        second.reserve(1)
        with pytest.raises(ExpectedVersionError):
            repo.add(second)

        assert repo.get(event_id).reserved_spots == 1
