from typing import Optional
from uuid import UUID

from src.service.inventory.driving_adapter.schema.base_schema import CamelModel


class WebhookAckResponse(CamelModel):
    received: bool = True
    event_type: str
    handled: bool
    order_id: Optional[UUID] = None
    duplicate: bool = False
    counter_updated: Optional[bool] = None
    tickets_remaining: Optional[int] = None
    sold_out: Optional[bool] = None
