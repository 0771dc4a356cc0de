"""Error taxonomy for the purchasing domain.

Validation failures and missing records reuse Protean's own exceptions, so
aggregate invariants, field validation and ``repository.get`` all raise the
same types callers catch. The remaining failure kinds are domain specific.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError

NotFoundError = ObjectNotFoundError


class PurchasingError(Exception):
    """Base class for purchasing errors that Protean has no equivalent for."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthorizationError(PurchasingError):
    """The requester is neither the owner of the resource nor an administrator."""


class ConflictError(PurchasingError):
    """The request conflicts with current state (payment reference, capacity)."""


class DatabaseError(PurchasingError):
    """A transaction could not be committed or rolled back by the store."""


__all__ = [
    "AuthorizationError",
    "ConflictError",
    "DatabaseError",
    "NotFoundError",
    "ObjectNotFoundError",
    "PurchasingError",
    "ValidationError",
]
