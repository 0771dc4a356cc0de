"""Resolve an order line's product reference to its catalog record."""

from protean.utils.globals import current_domain

from purchasing.catalog.course import Course
from purchasing.catalog.digital_product import DigitalProduct
from purchasing.catalog.event import Event
from purchasing.catalog.types import ProductType

CATALOG_RECORDS = {
    ProductType.COURSE: Course,
    ProductType.EVENT: Event,
    ProductType.DIGITAL_GOOD: DigitalProduct,
}


def catalog_repository(product_type):
    return current_domain.repository_for(CATALOG_RECORDS[ProductType(product_type)])


def load_product(product_type, product_id):
    """Load the catalog record. Raises ObjectNotFoundError when it does not exist."""
    return catalog_repository(product_type).get(product_id)
