"""Errors raised by the food catalog."""


class FoodCatalogError(Exception):
    """Base error for the food catalog."""


class ExternalServiceError(FoodCatalogError):
    """The external nutrition database could not be reached or answered badly."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PersistenceError(FoodCatalogError):
    """The local food catalog failed to read or write."""


class UsageTrackingError(FoodCatalogError):
    """Recording food usage failed."""
