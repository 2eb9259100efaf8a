from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import DomainError, InvalidQuantityError
from src.platform.logging.loguru_io import Logger
from src.service.inventory.domain.enum.order_status import OrderStatus
from src.service.inventory.domain.enum.sale_channel import SaleChannel
from src.service.inventory.domain.inventory_rules import is_positive_quantity


def generate_box_office_session_id() -> str:
    return f'pos_{uuid7().hex}'


@attrs.define
class Order:
    """One ledger row; quantity is immutable once written"""

    event_id: UUID
    quantity: int
    channel: SaleChannel
    status: OrderStatus = OrderStatus.PENDING
    external_session_id: Optional[str] = None
    customer_email: Optional[str] = None
    customer_name: Optional[str] = None
    amount_total: Optional[int] = None
    user_id: Optional[str] = None
    processed_by: Optional[str] = None
    processing_location: Optional[str] = None
    payment_method: Optional[str] = None
    id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        event_id: UUID,
        quantity: int,
        channel: SaleChannel,
        status: OrderStatus = OrderStatus.PENDING,
        external_session_id: Optional[str] = None,
        customer_email: Optional[str] = None,
        customer_name: Optional[str] = None,
        amount_total: Optional[int] = None,
        user_id: Optional[str] = None,
        processed_by: Optional[str] = None,
        processing_location: Optional[str] = None,
        payment_method: Optional[str] = None,
    ) -> 'Order':
        if not is_positive_quantity(quantity):
            raise InvalidQuantityError()
        if amount_total is not None and amount_total < 0:
            raise DomainError('amount_total must not be negative')

        now = datetime.now(timezone.utc)
        return cls(
            id=uuid7(),
            event_id=event_id,
            quantity=quantity,
            channel=channel,
            status=status,
            external_session_id=external_session_id,
            customer_email=customer_email,
            customer_name=customer_name,
            amount_total=amount_total,
            user_id=user_id,
            processed_by=processed_by,
            processing_location=processing_location,
            payment_method=payment_method,
            created_at=now,
            updated_at=now,
        )

    @property
    def counts_as_sold(self) -> bool:
        return self.status == OrderStatus.COMPLETED

    def _validate_pending(self, action: str) -> None:
        if self.status == OrderStatus.PENDING:
            return
        if self.status == OrderStatus.COMPLETED:
            raise DomainError(f'Cannot {action} a completed order')
        elif self.status == OrderStatus.CANCELLED:
            raise DomainError(f'Cannot {action} a cancelled order')
        raise DomainError(f'Cannot {action} a failed order')

    @Logger.io
    def complete(self) -> 'Order':
        self._validate_pending('complete')
        return attrs.evolve(
            self, status=OrderStatus.COMPLETED, updated_at=datetime.now(timezone.utc)
        )

    @Logger.io
    def cancel(self) -> 'Order':
        """
        Cancel order (Domain validation)

        Raises:
            DomainError: When the order already left PENDING
        """
        self._validate_pending('cancel')
        return attrs.evolve(
            self, status=OrderStatus.CANCELLED, updated_at=datetime.now(timezone.utc)
        )
