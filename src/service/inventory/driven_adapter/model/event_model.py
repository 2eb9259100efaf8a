from datetime import datetime
from typing import TYPE_CHECKING, List
from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base

if TYPE_CHECKING:
    from src.service.inventory.driven_adapter.model.order_model import OrderModel


class EventModel(Base):
    __tablename__ = 'event'
    __table_args__ = (
        CheckConstraint('tickets_total >= 0', name='ck_event_tickets_total_non_negative'),
        CheckConstraint('tickets_remaining >= 0', name='ck_event_tickets_remaining_non_negative'),
        CheckConstraint(
            'tickets_remaining <= tickets_total', name='ck_event_tickets_remaining_le_total'
        ),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    tickets_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    tickets_remaining: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sold_out: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    orders: Mapped[List['OrderModel']] = relationship(
        'OrderModel', back_populates='event', lazy='noload'
    )
