"""Application tests for RecordDownload."""

import pytest
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from purchasing.access.download import RecordDownload
from purchasing.access.download_grant import DownloadGrant
from purchasing.errors import AuthorizationError
from purchasing.order.cancellation import RefundOrder


@pytest.fixture()
def grant_id(shop, buyer_id):
    product_id = shop.register_digital_product(download_limit=2)
    order_id = shop.completed_order(buyer_id, [shop.line("digital_good", product_id, 1, "9.99")])
    grant = current_domain.repository_for(DownloadGrant).find_by_order(order_id)[0]
    return str(grant.id)


def _download(grant_id, buyer_id):
    current_domain.process(RecordDownload(grant_id=grant_id, buyer_id=buyer_id), asynchronous=False)


def _used(grant_id):
    return current_domain.repository_for(DownloadGrant).get(grant_id).downloads_used


class TestRecordDownload:
    def test_download_increments_counter(self, grant_id, buyer_id):
        _download(grant_id, buyer_id)
        assert _used(grant_id) == 1

    def test_limit_is_enforced(self, grant_id, buyer_id):
        _download(grant_id, buyer_id)
        _download(grant_id, buyer_id)
        with pytest.raises(ValidationError):
            _download(grant_id, buyer_id)
        assert _used(grant_id) == 2

    def test_other_buyer_is_refused(self, shop, grant_id):
        intruder = shop.register_buyer(email="mallory@example.com")
        with pytest.raises(AuthorizationError):
            _download(grant_id, intruder)
        assert _used(grant_id) == 0

    def test_refunded_grant_is_refused(self, grant_id, buyer_id):
        order_id = current_domain.repository_for(DownloadGrant).get(grant_id).order_id
        current_domain.process(RefundOrder(order_id=order_id), asynchronous=False)

        with pytest.raises(ValidationError):
            _download(grant_id, buyer_id)
        assert _used(grant_id) == 0
