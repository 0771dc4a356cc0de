"""Buyer aggregate — local record of a person who can place orders.

Identity and sessions are owned by the identity provider. Purchasing keeps
just enough to check that a buyer exists, address order emails, and tell
administrators apart from regular buyers.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import Boolean, DateTime, String

from purchasing.domain import purchasing


class BuyerRole(Enum):
    USER = "user"
    ADMIN = "admin"


@purchasing.aggregate
class Buyer:
    email = String(required=True, max_length=254)
    name = String(max_length=255)
    role = String(choices=BuyerRole, default=BuyerRole.USER.value)
    is_active = Boolean(default=True)
    registered_at = DateTime()

    @classmethod
    def register(cls, email, name=None, role=BuyerRole.USER.value, buyer_id=None):
        identity = {"id": buyer_id} if buyer_id else {}
        return cls(
            **identity,
            email=email,
            name=name,
            role=role,
            is_active=True,
            registered_at=datetime.now(UTC),
        )

    @property
    def is_admin(self):
        return self.role == BuyerRole.ADMIN.value

    def deactivate(self):
        self.is_active = False
