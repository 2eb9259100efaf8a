"""Application layer interfaces (Ports)"""

from src.service.inventory.app.interface.i_event_inventory_command_repo import (
    IEventInventoryCommandRepo,
)
from src.service.inventory.app.interface.i_event_inventory_query_repo import (
    IEventInventoryQueryRepo,
)
from src.service.inventory.app.interface.i_order_command_repo import IOrderCommandRepo
from src.service.inventory.app.interface.i_order_query_repo import IOrderQueryRepo
from src.service.inventory.app.interface.i_payment_webhook_verifier import (
    IPaymentWebhookVerifier,
)

__all__ = [
    'IEventInventoryCommandRepo',
    'IEventInventoryQueryRepo',
    'IOrderCommandRepo',
    'IOrderQueryRepo',
    'IPaymentWebhookVerifier',
]
