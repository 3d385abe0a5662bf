"""Addon links between warehouse items."""

from typing import List
from uuid import UUID

from django.db import transaction, IntegrityError

from apps.catalog.models import ProductAddon, WarehouseItem

from .exceptions import ItemNotFoundError, InvalidAddonError


def _get_item(item_id: UUID) -> WarehouseItem:
    try:
        return WarehouseItem.objects.get(id=item_id)
    except WarehouseItem.DoesNotExist:
        raise ItemNotFoundError(f"Warehouse item {item_id} not found")


def add_addon(
    *,
    parent_id: UUID,
    addon_id: UUID,
    is_required: bool = False,
    is_default_selected: bool = False,
    display_order: int = 0
) -> ProductAddon:
    """
    Link `addon_id` as an addon of `parent_id`.

    Raises:
        ItemNotFoundError: If either item doesn't exist
        InvalidAddonError: If the item is its own addon or the link exists
    """
    if str(parent_id) == str(addon_id):
        raise InvalidAddonError("An item cannot be its own addon")

    parent = _get_item(parent_id)
    addon = _get_item(addon_id)

    try:
        with transaction.atomic():
            return ProductAddon.objects.create(
                parent_product=parent,
                addon_product=addon,
                is_required=is_required,
                is_default_selected=is_default_selected,
                display_order=display_order,
            )
    except IntegrityError:
        raise InvalidAddonError(f"{addon.name} is already an addon of {parent.name}")


def remove_addon(*, parent_id: UUID, addon_id: UUID) -> None:
    """
    Raises:
        InvalidAddonError: If no such link exists
    """
    deleted, _ = ProductAddon.objects.filter(
        parent_product_id=parent_id,
        addon_product_id=addon_id,
    ).delete()
    if not deleted:
        raise InvalidAddonError("Addon link not found")


def get_item_addons(*, item_id: UUID) -> List[ProductAddon]:
    item = _get_item(item_id)
    return list(
        item.addon_links
        .select_related('addon_product')
        .order_by('display_order', 'addon_product__name')
    )
