"""Product type tag shared by order lines, catalog records and access handlers."""

from enum import Enum


class ProductType(Enum):
    COURSE = "course"
    EVENT = "event"
    DIGITAL_GOOD = "digital_good"
