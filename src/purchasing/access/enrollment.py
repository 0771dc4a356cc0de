"""Course enrollment — the access record a course line grants.

One enrollment exists per (buyer, course). A refund cancels it; a later
purchase of the same course re-activates it under the new order.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Identifier, String

from purchasing.domain import purchasing


class EnrollmentStatus(Enum):
    ENROLLED = "enrolled"
    CANCELLED = "cancelled"


@purchasing.aggregate
class Enrollment:
    buyer_id = Identifier(required=True)
    course_id = Identifier(required=True)
    order_id = Identifier(required=True)
    status = String(choices=EnrollmentStatus, default=EnrollmentStatus.ENROLLED.value)
    enrolled_at = DateTime()
    cancelled_at = DateTime()

    @classmethod
    def enroll(cls, buyer_id, course_id, order_id):
        return cls(
            buyer_id=buyer_id,
            course_id=course_id,
            order_id=order_id,
            status=EnrollmentStatus.ENROLLED.value,
            enrolled_at=datetime.now(UTC),
        )

    @property
    def is_active(self):
        return self.status == EnrollmentStatus.ENROLLED.value

    def reactivate(self, order_id):
        self.order_id = order_id
        self.status = EnrollmentStatus.ENROLLED.value
        self.enrolled_at = datetime.now(UTC)
        self.cancelled_at = None

    def cancel(self):
        self.status = EnrollmentStatus.CANCELLED.value
        self.cancelled_at = datetime.now(UTC)


@purchasing.repository(part_of=Enrollment)
class EnrollmentRepository:
    def find_for_buyer_and_course(self, buyer_id, course_id) -> Enrollment | None:
        results = self._dao.query.filter(buyer_id=str(buyer_id), course_id=str(course_id)).all().items
        return results[0] if results else None
