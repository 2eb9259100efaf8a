from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import ConfigDict, Field

from src.service.inventory.driving_adapter.schema.base_schema import CamelModel


class EventCreateRequest(CamelModel):
    model_config = ConfigDict(
        json_schema_extra={'example': {'name': 'Spring Showcase', 'ticketsTotal': 100}}
    )

    name: str = Field(min_length=1, max_length=255)
    tickets_total: int = Field(ge=0)


class EventResponse(CamelModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'id': '01936d8f-5e73-7c4e-a9c5-123456789abc',  # UUID7
                'name': 'Spring Showcase',
                'ticketsTotal': 100,
                'ticketsRemaining': 93,
                'soldOut': False,
                'createdAt': '2025-01-10T10:30:00',
            }
        }
    )

    id: UUID
    name: str
    tickets_total: int
    tickets_remaining: int
    sold_out: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class EventListResponse(CamelModel):
    events: List[EventResponse]


class TicketCountResponse(CamelModel):
    success: bool = True
    tickets_remaining: int
    sold_out: bool


class PurchaseValidationRequest(CamelModel):
    quantity: int


class PurchaseValidationResponse(CamelModel):
    valid: bool
    quantity: int
    tickets_remaining: int
    sold_out: bool
    reason: Optional[str] = None


class SyncTicketsResponse(CamelModel):
    success: bool
    tickets_remaining: Optional[int] = None
    sold_out: Optional[bool] = None
    corrected: bool = False
    drift_detected: bool = False
    dry_run: bool = False
    error: Optional[str] = None
