"""Course catalog record — price, availability and the enrollment counter."""

from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, Integer, String

from purchasing.domain import purchasing


@purchasing.aggregate
class Course:
    title = String(required=True, max_length=255)
    price_cents = Integer(required=True, min_value=0)
    is_published = Boolean(default=False)
    enrollment_count = Integer(default=0, min_value=0)
    created_at = DateTime()

    @classmethod
    def register(cls, title, price_cents, is_published=True):
        return cls(
            title=title,
            price_cents=price_cents,
            is_published=is_published,
            enrollment_count=0,
            created_at=datetime.now(UTC),
        )

    @property
    def is_purchasable(self):
        return bool(self.is_published)

    def enroll(self):
        self.enrollment_count = (self.enrollment_count or 0) + 1

    def unenroll(self):
        self.enrollment_count = max((self.enrollment_count or 0) - 1, 0)
