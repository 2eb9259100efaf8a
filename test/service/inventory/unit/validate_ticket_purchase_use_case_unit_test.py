"""
Unit tests for ValidateTicketPurchaseUseCase

Test Focus:
1. Advisory answer with the reason for a rejection
2. Unknown event is NotFoundError
"""

from unittest.mock import AsyncMock

import pytest

from src.platform.exception.exceptions import NotFoundError
from src.service.inventory.app.query.validate_ticket_purchase_use_case import (
    ValidateTicketPurchaseUseCase,
)
from test.service.inventory.unit.helpers import EVENT_ID, make_event, no_retry_policy


def _build(event: object) -> ValidateTicketPurchaseUseCase:
    repo = AsyncMock()
    repo.get_by_id = AsyncMock(return_value=event)
    return ValidateTicketPurchaseUseCase(
        event_inventory_query_repo=repo, retry_policy=no_retry_policy()
    )


@pytest.mark.unit
class TestValidateTicketPurchase:
    @pytest.mark.asyncio
    async def test_quantity_within_remaining_is_valid(self) -> None:
        use_case = _build(make_event(tickets_total=10, tickets_remaining=3))

        result = await use_case.execute(event_id=EVENT_ID, quantity=3)

        assert result.valid is True
        assert result.reason is None
        assert result.tickets_remaining == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        'remaining,quantity,reason',
        [
            (3, 4, 'not enough tickets remaining'),
            (0, 1, 'event sold out'),
            (3, 0, 'quantity must be a positive integer'),
            (3, -2, 'quantity must be a positive integer'),
        ],
    )
    async def test_rejections_carry_reason(self, remaining: int, quantity: int, reason: str) -> None:
        use_case = _build(make_event(tickets_total=10, tickets_remaining=remaining))

        result = await use_case.execute(event_id=EVENT_ID, quantity=quantity)

        assert result.valid is False
        assert result.reason == reason

    @pytest.mark.asyncio
    async def test_unknown_event(self) -> None:
        with pytest.raises(NotFoundError):
            await _build(None).execute(event_id=EVENT_ID, quantity=1)
