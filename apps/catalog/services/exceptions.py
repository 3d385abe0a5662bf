"""Domain-specific exceptions for the warehouse catalog."""


class CatalogServiceError(Exception):
    """Base exception for catalog services."""
    pass


class ItemNotFoundError(CatalogServiceError):
    """Raised when a warehouse item does not exist."""
    pass


class UnknownItemsError(CatalogServiceError):
    """Raised when a reorder or bulk request references unknown ids."""
    pass


class DuplicateItemsError(CatalogServiceError):
    """Raised when a reorder request lists the same id more than once."""
    pass


class InvalidBulkActionError(CatalogServiceError):
    """Raised for an unsupported bulk action or a missing action value."""
    pass


class InsufficientStockError(CatalogServiceError):
    """Raised when a stock adjustment would go below zero."""
    pass


class InvalidAddonError(CatalogServiceError):
    """Raised when an addon link is invalid (self-link or duplicate)."""
    pass
