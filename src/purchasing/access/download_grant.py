"""Download grant — a download-limited entitlement to a digital product.

The grant keeps its own copy of the limit so later catalog changes do not
alter what a buyer already paid for. Each order line gets its own grant.
Revoked grants stay on record.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String

from purchasing.domain import purchasing


class GrantStatus(Enum):
    ACTIVE = "active"
    REVOKED = "revoked"


@purchasing.aggregate
class DownloadGrant:
    buyer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    order_id = Identifier(required=True)
    line_id = Identifier(required=True)
    downloads_used = Integer(default=0, min_value=0)
    download_limit = Integer(required=True, min_value=1)
    status = String(choices=GrantStatus, default=GrantStatus.ACTIVE.value)
    granted_at = DateTime()
    revoked_at = DateTime()
    last_downloaded_at = DateTime()

    @invariant.post
    def downloads_cannot_exceed_limit(self):
        if (self.downloads_used or 0) > self.download_limit:
            raise ValidationError({"downloads_used": ["Downloads used cannot exceed the download limit"]})

    @classmethod
    def grant(cls, buyer_id, product_id, order_id, line_id, download_limit):
        return cls(
            buyer_id=buyer_id,
            product_id=product_id,
            order_id=order_id,
            line_id=line_id,
            downloads_used=0,
            download_limit=download_limit,
            status=GrantStatus.ACTIVE.value,
            granted_at=datetime.now(UTC),
        )

    @property
    def is_revoked(self):
        return self.status == GrantStatus.REVOKED.value

    @property
    def downloads_remaining(self):
        return max(self.download_limit - (self.downloads_used or 0), 0)

    def record_download(self):
        if self.is_revoked:
            raise ValidationError({"status": ["Download access has been revoked"]})
        if self.downloads_remaining == 0:
            raise ValidationError({"downloads_used": [f"Download limit of {self.download_limit} reached"]})

        self.downloads_used = (self.downloads_used or 0) + 1
        self.last_downloaded_at = datetime.now(UTC)

    def revoke(self):
        self.status = GrantStatus.REVOKED.value
        self.revoked_at = datetime.now(UTC)


@purchasing.repository(part_of=DownloadGrant)
class DownloadGrantRepository:
    def find_for_line(self, line_id) -> DownloadGrant | None:
        results = self._dao.query.filter(line_id=str(line_id)).all().items
        return results[0] if results else None

    def find_by_order(self, order_id) -> list[DownloadGrant]:
        return self._dao.query.filter(order_id=str(order_id)).all().items
