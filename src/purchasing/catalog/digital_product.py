"""Digital product catalog record — download limit and the grant counter."""

from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, Integer, String

from purchasing.domain import purchasing

DEFAULT_DOWNLOAD_LIMIT = 3


@purchasing.aggregate
class DigitalProduct:
    title = String(required=True, max_length=255)
    price_cents = Integer(required=True, min_value=0)
    is_published = Boolean(default=False)
    download_limit = Integer(default=DEFAULT_DOWNLOAD_LIMIT, min_value=1)
    download_count = Integer(default=0, min_value=0)
    created_at = DateTime()

    @classmethod
    def register(cls, title, price_cents, download_limit=DEFAULT_DOWNLOAD_LIMIT, is_published=True):
        return cls(
            title=title,
            price_cents=price_cents,
            is_published=is_published,
            download_limit=download_limit,
            download_count=0,
            created_at=datetime.now(UTC),
        )

    @property
    def is_purchasable(self):
        return bool(self.is_published)

    def record_grant(self):
        self.download_count = (self.download_count or 0) + 1

    def revoke_grant(self):
        self.download_count = max((self.download_count or 0) - 1, 0)
