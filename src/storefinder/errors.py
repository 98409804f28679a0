"""Exception types raised by the store search core."""

from __future__ import annotations


class StoreFinderError(Exception):
    """Base class for all store finder errors."""


class InvalidInputError(StoreFinderError, ValueError):
    """Raised when a coordinate, radius, postcode or store attribute is out of range or malformed."""


class PostcodeNotFoundError(StoreFinderError):
    """Raised when a postcode has no matching record in the lookup table."""

    def __init__(self, postcode: str) -> None:
        super().__init__(f"Postcode not found: {postcode}")
        self.postcode = postcode


class StorageUnavailableError(StoreFinderError):
    """Raised when the storage backend fails to answer a query or write."""


class PostcodeImportError(StoreFinderError):
    """Raised when the postcode bulk import cannot complete."""
