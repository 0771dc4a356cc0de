"""Event booking — the confirmed seats an event line grants.

One booking exists per order line, so a cart holding the same event twice
books both blocks of seats.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Identifier, Integer, String

from purchasing.domain import purchasing


class BookingStatus(Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


@purchasing.aggregate
class Booking:
    buyer_id = Identifier(required=True)
    event_id = Identifier(required=True)
    order_id = Identifier(required=True)
    line_id = Identifier(required=True)
    status = String(choices=BookingStatus, default=BookingStatus.CONFIRMED.value)
    attendees = Integer(required=True, min_value=1)
    booked_at = DateTime()
    cancelled_at = DateTime()

    @classmethod
    def confirm(cls, buyer_id, event_id, order_id, line_id, attendees):
        return cls(
            buyer_id=buyer_id,
            event_id=event_id,
            order_id=order_id,
            line_id=line_id,
            status=BookingStatus.CONFIRMED.value,
            attendees=attendees,
            booked_at=datetime.now(UTC),
        )

    @property
    def is_confirmed(self):
        return self.status == BookingStatus.CONFIRMED.value

    def cancel(self):
        self.status = BookingStatus.CANCELLED.value
        self.cancelled_at = datetime.now(UTC)


@purchasing.repository(part_of=Booking)
class BookingRepository:
    def find_for_line(self, line_id) -> Booking | None:
        results = self._dao.query.filter(line_id=str(line_id)).all().items
        return results[0] if results else None
