"""Event catalog record with a capacity-bounded seat counter.

Seat model:
    capacity:        Total seats the venue holds
    available_spots: Seats not yet booked (0 <= available_spots <= capacity)
    reserved_spots:  Seats held by placed but unfulfilled orders

New orders may only claim ``available_spots - reserved_spots``. Fulfillment
turns a reservation into a booking; cancellation hands it back.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Integer, String

from purchasing.domain import purchasing
from purchasing.errors import ConflictError


@purchasing.aggregate
class Event:
    title = String(required=True, max_length=255)
    price_cents = Integer(required=True, min_value=0)
    is_published = Boolean(default=False)
    starts_at = DateTime()
    capacity = Integer(required=True, min_value=0)
    available_spots = Integer(required=True, min_value=0)
    reserved_spots = Integer(default=0, min_value=0)
    created_at = DateTime()

    @invariant.post
    def available_spots_cannot_exceed_capacity(self):
        if self.available_spots is not None and self.capacity is not None and self.available_spots > self.capacity:
            raise ValidationError({"available_spots": ["Available spots cannot exceed capacity"]})

    @classmethod
    def register(cls, title, price_cents, capacity, starts_at=None, is_published=True):
        return cls(
            title=title,
            price_cents=price_cents,
            is_published=is_published,
            starts_at=starts_at,
            capacity=capacity,
            available_spots=capacity,
            reserved_spots=0,
            created_at=datetime.now(UTC),
        )

    @property
    def unreserved_spots(self):
        return self.available_spots - (self.reserved_spots or 0)

    @property
    def is_purchasable(self):
        if not self.is_published:
            return False
        if self.starts_at is None:
            return True
        now = datetime.now(UTC)
        if self.starts_at.tzinfo is None:
            now = now.replace(tzinfo=None)
        return self.starts_at > now

    def reserve(self, quantity):
        """Hold seats for a newly placed order."""
        if self.unreserved_spots < quantity:
            raise ConflictError(
                f"Insufficient capacity for event {self.id}: {self.unreserved_spots} available, {quantity} requested"
            )
        self.reserved_spots = (self.reserved_spots or 0) + quantity

    def release_reservation(self, quantity):
        self.reserved_spots = max((self.reserved_spots or 0) - quantity, 0)

    def book(self, quantity):
        """Convert a reservation into booked seats."""
        if self.available_spots < quantity:
            raise ConflictError(
                f"Insufficient capacity for event {self.id}: {self.available_spots} available, {quantity} requested"
            )
        with atomic_change(self):
            self.reserved_spots = max((self.reserved_spots or 0) - quantity, 0)
            self.available_spots = self.available_spots - quantity

    def release_booking(self, quantity):
        self.available_spots = min(self.available_spots + quantity, self.capacity)
