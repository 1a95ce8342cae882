"""
Households Module - Houses and the kitchens that back them

- HouseService: list / create / select the current House
- KitchenResolver: House → kitchen id, created on demand, cached locally
"""

from pantrykit.domain.households.house_service import HouseService
from pantrykit.domain.households.kitchen_resolver import KitchenResolver

__all__ = [
    'HouseService',
    'KitchenResolver',
]
