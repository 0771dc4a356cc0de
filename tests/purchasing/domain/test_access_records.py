"""Tests for enrollment, booking and download grant records."""

import pytest
from protean.exceptions import ValidationError

from purchasing.access.booking import Booking, BookingStatus
from purchasing.access.download_grant import DownloadGrant, GrantStatus
from purchasing.access.enrollment import Enrollment, EnrollmentStatus
from purchasing.access.handlers import CourseAccess, DigitalGoodAccess, EventAccess, handler_for
from purchasing.catalog.course import Course
from purchasing.catalog.digital_product import DEFAULT_DOWNLOAD_LIMIT, DigitalProduct


class TestEnrollment:
    def test_enroll(self):
        enrollment = Enrollment.enroll(buyer_id="b-1", course_id="c-1", order_id="o-1")
        assert enrollment.status == EnrollmentStatus.ENROLLED.value
        assert enrollment.is_active
        assert enrollment.enrolled_at is not None

    def test_cancel_and_reactivate(self):
        enrollment = Enrollment.enroll(buyer_id="b-1", course_id="c-1", order_id="o-1")
        enrollment.cancel()
        assert enrollment.status == EnrollmentStatus.CANCELLED.value
        assert enrollment.cancelled_at is not None

        enrollment.reactivate("o-2")
        assert enrollment.is_active
        assert str(enrollment.order_id) == "o-2"
        assert enrollment.cancelled_at is None


class TestBooking:
    def test_confirm_and_cancel(self):
        booking = Booking.confirm(buyer_id="b-1", event_id="e-1", order_id="o-1", line_id="l-1", attendees=2)
        assert booking.is_confirmed
        assert booking.attendees == 2

        booking.cancel()
        assert booking.status == BookingStatus.CANCELLED.value
        assert not booking.is_confirmed


class TestDownloadGrant:
    def _grant(self, limit=2):
        return DownloadGrant.grant(
            buyer_id="b-1", product_id="d-1", order_id="o-1", line_id="l-1", download_limit=limit
        )

    def test_new_grant_is_unused(self):
        grant = self._grant()
        assert grant.downloads_used == 0
        assert grant.status == GrantStatus.ACTIVE.value
        assert grant.downloads_remaining == 2

    def test_record_download_until_limit(self):
        grant = self._grant(limit=2)
        grant.record_download()
        grant.record_download()
        assert grant.downloads_used == 2
        with pytest.raises(ValidationError):
            grant.record_download()
        assert grant.downloads_used == 2

    def test_revoked_grant_refuses_downloads(self):
        grant = self._grant()
        grant.revoke()
        assert grant.is_revoked
        with pytest.raises(ValidationError):
            grant.record_download()
        assert grant.downloads_used == 0


class TestCatalogCounters:
    def test_course_unenroll_floors_at_zero(self):
        course = Course.register(title="Intro", price_cents=5000)
        course.enroll()
        course.unenroll()
        course.unenroll()
        assert course.enrollment_count == 0

    def test_digital_product_counter(self):
        product = DigitalProduct.register(title="PDF", price_cents=999)
        assert product.download_limit == DEFAULT_DOWNLOAD_LIMIT
        product.record_grant()
        assert product.download_count == 1
        product.revoke_grant()
        product.revoke_grant()
        assert product.download_count == 0


class TestHandlerRegistry:
    @pytest.mark.parametrize(
        "product_type,handler_cls",
        [("course", CourseAccess), ("event", EventAccess), ("digital_good", DigitalGoodAccess)],
    )
    def test_one_handler_per_product_type(self, product_type, handler_cls):
        assert isinstance(handler_for(product_type), handler_cls)

    def test_unknown_product_type(self):
        with pytest.raises(ValueError):
            handler_for("bundle")
