from typing import Optional
from uuid import UUID

from pydantic import ConfigDict, Field

from src.service.inventory.driving_adapter.schema.base_schema import CamelModel


class VerifyCountsRequest(CamelModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {'eventId': '01936d8f-5e73-7c4e-a9c5-123456789abc', 'fix': True}
        }
    )

    event_id: UUID
    fix: bool = False


class TicketCountsReport(CamelModel):
    tickets_total: int
    current_remaining: int
    calculated_remaining: int
    discrepancy: int


class VerifyCountsResponse(CamelModel):
    """``counts`` when nothing was fixed; ``before`` / ``after`` when it was"""

    success: bool = True
    fixed: bool
    counts: Optional[TicketCountsReport] = None
    before: Optional[TicketCountsReport] = None
    after: Optional[TicketCountsReport] = None


class AdminTicketCountsRequest(CamelModel):
    model_config = ConfigDict(
        json_schema_extra={'example': {'ticketsTotal': 80, 'ticketsRemaining': 80}}
    )

    tickets_total: int = Field(ge=0)
    tickets_remaining: int = Field(ge=0)
