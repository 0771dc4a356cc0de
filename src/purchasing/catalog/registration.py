"""Catalog registration and publishing — commands and handlers.

Catalog management lives outside purchasing; these commands seed and toggle
the records purchasing reads prices, titles and capacity from.
"""

from protean import handle
from protean.fields import Boolean, DateTime, Identifier, Integer, String

from purchasing.catalog.course import Course
from purchasing.catalog.digital_product import DEFAULT_DOWNLOAD_LIMIT, DigitalProduct
from purchasing.catalog.event import Event
from purchasing.catalog.lookup import catalog_repository, load_product
from purchasing.catalog.types import ProductType
from purchasing.domain import purchasing
from purchasing.pricing import to_cents


@purchasing.command(part_of="Course")
class RegisterCourse:
    title = String(required=True, max_length=255)
    price = String(required=True, max_length=20)  # Decimal as string
    is_published = Boolean(default=True)


@purchasing.command(part_of="Event")
class RegisterEvent:
    title = String(required=True, max_length=255)
    price = String(required=True, max_length=20)  # Decimal as string
    capacity = Integer(required=True, min_value=0)
    starts_at = DateTime()
    is_published = Boolean(default=True)


@purchasing.command(part_of="DigitalProduct")
class RegisterDigitalProduct:
    title = String(required=True, max_length=255)
    price = String(required=True, max_length=20)  # Decimal as string
    download_limit = Integer(default=DEFAULT_DOWNLOAD_LIMIT, min_value=1)
    is_published = Boolean(default=True)


@purchasing.command(part_of="Course")
class ChangeAvailability:
    """Publish or withdraw any catalog record, addressed by product type."""

    product_type = String(required=True, choices=ProductType)
    product_id = Identifier(required=True)
    is_published = Boolean(required=True)


@purchasing.command_handler(part_of=Course)
class CourseCatalogHandler:
    @handle(RegisterCourse)
    def register_course(self, command):
        course = Course.register(
            title=command.title,
            price_cents=to_cents(command.price),
            is_published=command.is_published,
        )
        catalog_repository(ProductType.COURSE).add(course)
        return str(course.id)

    @handle(ChangeAvailability)
    def change_availability(self, command):
        record = load_product(command.product_type, command.product_id)
        record.is_published = command.is_published
        catalog_repository(command.product_type).add(record)


@purchasing.command_handler(part_of=Event)
class EventCatalogHandler:
    @handle(RegisterEvent)
    def register_event(self, command):
        event = Event.register(
            title=command.title,
            price_cents=to_cents(command.price),
            capacity=command.capacity,
            starts_at=command.starts_at,
            is_published=command.is_published,
        )
        catalog_repository(ProductType.EVENT).add(event)
        return str(event.id)


@purchasing.command_handler(part_of=DigitalProduct)
class DigitalProductCatalogHandler:
    @handle(RegisterDigitalProduct)
    def register_digital_product(self, command):
        product = DigitalProduct.register(
            title=command.title,
            price_cents=to_cents(command.price),
            download_limit=command.download_limit or DEFAULT_DOWNLOAD_LIMIT,
            is_published=command.is_published,
        )
        catalog_repository(ProductType.DIGITAL_GOOD).add(product)
        return str(product.id)
