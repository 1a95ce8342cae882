"""
Inventory Module - items and batches in the selected House's kitchen
"""

from pantrykit.common.schemas.inventory import InventoryItem, ItemInput, ItemUpdate
from pantrykit.domain.inventory.inventory_repository import InventoryRepository

__all__ = [
    'InventoryRepository',
    'InventoryItem',
    'ItemInput',
    'ItemUpdate',
]
