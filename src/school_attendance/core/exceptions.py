from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class StoreError(DomainError):
    """Raised by a document store adapter when an operation fails."""


class SubscriptionError(StoreError):
    """Raised when a live feed breaks; the view stops until re-subscribed."""


class CatalogLoadError(DomainError):
    """Raised when one or more entity types could not be reloaded.

    Types that did load are already applied when this is raised.
    """

    def __init__(self, failed_types: list[str], causes: dict[str, Exception] | None = None):
        self.failed_types = list(failed_types)
        self.causes = dict(causes or {})
        super().__init__(f"Failed to load: {', '.join(self.failed_types)}")


class AggregationError(DomainError):
    """Raised when a recap run fails; no partial recap is produced."""
