"""Errors raised by the food resolution and logging core."""

from nutrilog.domain.foods import FoodRecord


class NutrilogError(Exception):
    """Base class for domain errors."""


class NotFoundError(NutrilogError):
    """Requested item does not exist upstream or locally."""


class UpstreamUnavailableError(NutrilogError):
    """The external catalog could not be reached; the call may be retried."""


class InvalidUpstreamDataError(NutrilogError):
    """The external catalog returned a payload that failed validation."""


class InvalidInputError(NutrilogError):
    """Caller input was rejected before any I/O."""


class DuplicateRecordError(NutrilogError):
    """A uniqueness invariant on food records was hit."""

    def __init__(self, message: str, existing: FoodRecord | None = None) -> None:
        super().__init__(message)
        self.existing = existing
