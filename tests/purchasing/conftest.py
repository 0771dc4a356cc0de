import json

import pytest
from protean.integrations.pytest import DomainFixture
from protean.utils.globals import current_domain


@pytest.fixture(scope="session")
def purchasing_bed():
    from purchasing.domain import purchasing
    from purchasing.utils.db import drop_db, setup_db

    bed = DomainFixture(purchasing)
    bed.setup()
    setup_db(purchasing)
    yield bed
    drop_db(purchasing)
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(purchasing_bed):
    with purchasing_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def run_around_tests(_ctx):
    """Clear every store and the notifier after each test."""
    from purchasing.notification import reset_notifier

    reset_notifier()
    yield

    for _, provider in current_domain.providers.items():
        provider._data_reset()
    current_domain.event_store.store._data_reset()
    reset_notifier()


@pytest.fixture()
def notifier():
    from purchasing.notification import get_notifier

    return get_notifier()


# ---------------------------------------------------------------------------
# Catalog, buyer and order builders
# ---------------------------------------------------------------------------
class Shop:
    """Drives the purchasing commands the way a storefront would."""

    def register_buyer(self, email="ada@example.com", role="user", buyer_id=None):
        from purchasing.buyer.registration import RegisterBuyer

        return current_domain.process(
            RegisterBuyer(buyer_id=buyer_id, email=email, name="Ada", role=role),
            asynchronous=False,
        )

    def register_course(self, title="Intro to Python", price="50.00", is_published=True):
        from purchasing.catalog.registration import RegisterCourse

        return current_domain.process(
            RegisterCourse(title=title, price=price, is_published=is_published),
            asynchronous=False,
        )

    def register_event(self, title="PyCon Workshop", price="30.00", capacity=10, starts_at=None, is_published=True):
        from purchasing.catalog.registration import RegisterEvent

        return current_domain.process(
            RegisterEvent(
                title=title,
                price=price,
                capacity=capacity,
                starts_at=starts_at,
                is_published=is_published,
            ),
            asynchronous=False,
        )

    def register_digital_product(self, title="Cheat Sheet PDF", price="9.99", download_limit=3, is_published=True):
        from purchasing.catalog.registration import RegisterDigitalProduct

        return current_domain.process(
            RegisterDigitalProduct(
                title=title,
                price=price,
                download_limit=download_limit,
                is_published=is_published,
            ),
            asynchronous=False,
        )

    @staticmethod
    def line(product_type, product_id, quantity=1, unit_price="50.00"):
        return {
            "product_type": product_type,
            "product_id": product_id,
            "quantity": quantity,
            "unit_price": unit_price,
        }

    def place(self, buyer_id, lines, contact_email="ada@example.com"):
        from purchasing.order.creation import PlaceOrder

        return current_domain.process(
            PlaceOrder(buyer_id=buyer_id, contact_email=contact_email, lines=json.dumps(lines)),
            asynchronous=False,
        )

    def pay(self, order_id, payment_ref="pay_1"):
        """Attach and confirm a payment, leaving the order PAID."""
        from purchasing.order.payment import AttachPayment, ConfirmPayment

        current_domain.process(
            AttachPayment(order_id=order_id, payment_ref=payment_ref, payment_method="card"),
            asynchronous=False,
        )
        current_domain.process(ConfirmPayment(order_id=order_id, payment_ref=payment_ref), asynchronous=False)

    def fulfill(self, order_id):
        from purchasing.order.fulfillment import FulfillOrder

        current_domain.process(FulfillOrder(order_id=order_id), asynchronous=False)

    def completed_order(self, buyer_id, lines, payment_ref="pay_1"):
        order_id = self.place(buyer_id, lines)
        self.pay(order_id, payment_ref=payment_ref)
        self.fulfill(order_id)
        return order_id


@pytest.fixture()
def shop():
    return Shop()


@pytest.fixture()
def buyer_id(shop):
    return shop.register_buyer()
