"""Access handlers — one grant/revoke pair per product type.

Fulfillment and refund dispatch each order line to the handler registered
for its ``product_type``. Bookings and download grants are keyed by order
line, enrollments by (buyer, course). Every grant is insert-if-absent, so
running fulfillment twice for the same order creates nothing new. Handlers load and
save catalog records through the current unit of work; they never commit.
"""

from abc import ABC, abstractmethod

import structlog
from protean.utils.globals import current_domain

from purchasing.access.booking import Booking
from purchasing.access.download_grant import DownloadGrant
from purchasing.access.enrollment import Enrollment
from purchasing.catalog.lookup import catalog_repository
from purchasing.catalog.types import ProductType

logger = structlog.get_logger(__name__)


class AccessHandler(ABC):
    """Grants and revokes the access an order line represents."""

    product_type: ProductType

    @abstractmethod
    def grant(self, order, line) -> bool:
        """Create the access record for ``line``. Returns False if it already existed."""
        ...

    @abstractmethod
    def revoke(self, order, line) -> bool:
        """Reverse the access ``order`` granted for ``line``. Returns False if nothing was active."""
        ...


class CourseAccess(AccessHandler):
    product_type = ProductType.COURSE

    def grant(self, order, line):
        repo = current_domain.repository_for(Enrollment)
        enrollment = repo.find_for_buyer_and_course(order.buyer_id, line.product_id)
        if enrollment is not None and enrollment.is_active:
            return False

        if enrollment is None:
            enrollment = Enrollment.enroll(
                buyer_id=order.buyer_id,
                course_id=line.product_id,
                order_id=order.id,
            )
        else:
            enrollment.reactivate(order.id)
        repo.add(enrollment)

        courses = catalog_repository(self.product_type)
        course = courses.get(line.product_id)
        course.enroll()
        courses.add(course)
        return True

    def revoke(self, order, line):
        repo = current_domain.repository_for(Enrollment)
        enrollment = repo.find_for_buyer_and_course(order.buyer_id, line.product_id)
        if enrollment is None or not enrollment.is_active or str(enrollment.order_id) != str(order.id):
            return False

        enrollment.cancel()
        repo.add(enrollment)

        courses = catalog_repository(self.product_type)
        course = courses.get(line.product_id)
        course.unenroll()
        courses.add(course)
        return True


class EventAccess(AccessHandler):
    product_type = ProductType.EVENT

    def grant(self, order, line):
        repo = current_domain.repository_for(Booking)
        if repo.find_for_line(line.id) is not None:
            return False

        events = catalog_repository(self.product_type)
        event = events.get(line.product_id)
        event.book(line.quantity)
        events.add(event)

        repo.add(
            Booking.confirm(
                buyer_id=order.buyer_id,
                event_id=line.product_id,
                order_id=order.id,
                line_id=line.id,
                attendees=line.quantity,
            )
        )
        return True

    def revoke(self, order, line):
        repo = current_domain.repository_for(Booking)
        booking = repo.find_for_line(line.id)
        if booking is None or not booking.is_confirmed:
            return False

        booking.cancel()
        repo.add(booking)

        events = catalog_repository(self.product_type)
        event = events.get(line.product_id)
        event.release_booking(booking.attendees)
        events.add(event)
        return True


class DigitalGoodAccess(AccessHandler):
    product_type = ProductType.DIGITAL_GOOD

    def grant(self, order, line):
        repo = current_domain.repository_for(DownloadGrant)
        if repo.find_for_line(line.id) is not None:
            return False

        products = catalog_repository(self.product_type)
        product = products.get(line.product_id)
        product.record_grant()
        products.add(product)

        repo.add(
            DownloadGrant.grant(
                buyer_id=order.buyer_id,
                product_id=line.product_id,
                order_id=order.id,
                line_id=line.id,
                download_limit=product.download_limit,
            )
        )
        return True

    def revoke(self, order, line):
        repo = current_domain.repository_for(DownloadGrant)
        grant = repo.find_for_line(line.id)
        if grant is None or grant.is_revoked:
            return False

        grant.revoke()
        repo.add(grant)

        products = catalog_repository(self.product_type)
        product = products.get(line.product_id)
        product.revoke_grant()
        products.add(product)
        return True


_HANDLERS = {handler.product_type: handler for handler in (CourseAccess(), EventAccess(), DigitalGoodAccess())}


def handler_for(product_type) -> AccessHandler:
    return _HANDLERS[ProductType(product_type)]


def grant_order_access(order) -> int:
    """Grant access for every line of ``order``. Returns how many records were created."""
    created = 0
    for line in order.lines:
        if handler_for(line.product_type).grant(order, line):
            created += 1
    logger.info("Access granted for order", order_id=str(order.id), created=created)
    return created


def revoke_order_access(order) -> int:
    """Revoke the access ``order`` granted. Returns how many records were reversed."""
    revoked = 0
    for line in order.lines:
        if handler_for(line.product_type).revoke(order, line):
            revoked += 1
    logger.info("Access revoked for order", order_id=str(order.id), revoked=revoked)
    return revoked
