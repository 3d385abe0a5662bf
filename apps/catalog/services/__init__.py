"""Services for the warehouse catalog."""

from .exceptions import (
    CatalogServiceError,
    ItemNotFoundError,
    UnknownItemsError,
    DuplicateItemsError,
    InvalidBulkActionError,
    InsufficientStockError,
    InvalidAddonError,
)
from .item_management import (
    BULK_ACTIONS,
    reorder,
    bulk_update_items,
    adjust_stock,
    low_stock_items,
    filter_items,
)
from .addon_management import add_addon, remove_addon, get_item_addons

__all__ = [
    # Exceptions
    'CatalogServiceError',
    'ItemNotFoundError',
    'UnknownItemsError',
    'DuplicateItemsError',
    'InvalidBulkActionError',
    'InsufficientStockError',
    'InvalidAddonError',
    # Items
    'BULK_ACTIONS',
    'reorder',
    'bulk_update_items',
    'adjust_stock',
    'low_stock_items',
    'filter_items',
    # Addons
    'add_addon',
    'remove_addon',
    'get_item_addons',
]
