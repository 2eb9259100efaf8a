from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import ConfigDict, EmailStr

from src.service.inventory.driving_adapter.schema.base_schema import CamelModel


class OrderResponse(CamelModel):
    id: UUID
    event_id: UUID
    quantity: int
    status: str
    channel: str
    external_session_id: Optional[str] = None
    customer_email: Optional[str] = None
    customer_name: Optional[str] = None
    amount_total: Optional[int] = None
    created_at: Optional[datetime] = None


class PendingOrderCreateRequest(CamelModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'eventId': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                'quantity': 2,
                'customerEmail': 'fan@example.com',
            }
        }
    )

    event_id: UUID
    quantity: int
    external_session_id: Optional[str] = None
    user_id: Optional[str] = None
    customer_email: Optional[EmailStr] = None
    customer_name: Optional[str] = None
    amount_total: Optional[int] = None


class SaleResponse(CamelModel):
    """Result of a sale that reached the ledger"""

    order: OrderResponse
    duplicate: bool = False
    counter_updated: bool = True
    tickets_remaining: Optional[int] = None
    sold_out: Optional[bool] = None


class BoxOfficeSaleRequest(CamelModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'eventId': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                'quantity': 2,
                'customerName': 'Walk-in',
                'paymentMethod': 'cash',
                'processedBy': 'staff-17',
                'processingLocation': 'Main door',
            }
        }
    )

    event_id: UUID
    quantity: int
    customer_email: Optional[EmailStr] = None
    customer_name: Optional[str] = None
    amount_total: Optional[int] = None
    payment_method: Literal['cash', 'card', 'comp'] = 'cash'
    processed_by: Optional[str] = None
    processing_location: Optional[str] = None
