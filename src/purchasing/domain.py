"""Purchasing bounded context — Orders, Fulfillment and Compensation.

Turns cart snapshots into orders, drives them through the order status
lifecycle, and grants or revokes access (enrollments, bookings, download
grants) atomically with the order's own state changes.
"""

from protean.domain import Domain

from purchasing.utils.logging import configure_logging

configure_logging()

# Domain Composition Root
purchasing = Domain(name="purchasing")
