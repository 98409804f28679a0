"""Postcode normalization and coordinate resolution."""

from __future__ import annotations

import logging
import re
from typing import Optional

from ..data.postcodes_repository import PostcodeRepository
from ..errors import InvalidInputError
from ..models.domain import Coordinate

MAX_POSTCODE_LENGTH = 10
# Compact UK postcodes are five to seven characters; the last three form the inward code.
_INWARD_CODE_LENGTH = 3
_COMPACT_LENGTHS = range(5, 8)
_VALID_POSTCODE = re.compile(r"^[A-Z0-9 ]+$")

logger = logging.getLogger(__name__)


def normalize_postcode(value: str) -> str:
    """Canonical postcode key: upper-case, single-spaced, with the inward code split off."""

    if value is None:
        raise InvalidInputError("Postcode is required.")
    normalized = " ".join(str(value).split()).upper()
    if not normalized:
        raise InvalidInputError("Postcode must not be empty.")
    if len(normalized) > MAX_POSTCODE_LENGTH or not _VALID_POSTCODE.match(normalized):
        raise InvalidInputError(f"Malformed postcode: {value!r}")

    if " " not in normalized and len(normalized) in _COMPACT_LENGTHS:
        normalized = f"{normalized[:-_INWARD_CODE_LENGTH]} {normalized[-_INWARD_CODE_LENGTH:]}"
    return normalized


class PostcodeResolver:
    """Maps postal codes to coordinates using the postcode lookup table."""

    def __init__(self, repository: PostcodeRepository) -> None:
        self.repository = repository

    def resolve(self, postcode: str) -> Optional[Coordinate]:
        """Return the coordinate for ``postcode``, or None when no record matches."""
        key = normalize_postcode(postcode)
        location = self.repository.lookup(key)
        if location is None:
            logger.info(f"No coordinates found for postcode '{key}'")
        return location
