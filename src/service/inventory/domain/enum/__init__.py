"""Inventory Domain Enums"""

from src.service.inventory.domain.enum.order_status import OrderStatus
from src.service.inventory.domain.enum.sale_channel import SaleChannel

__all__ = ['OrderStatus', 'SaleChannel']
