from datetime import datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base

if TYPE_CHECKING:
    from src.service.inventory.driven_adapter.model.event_model import EventModel


class OrderModel(Base):
    __tablename__ = 'orders'
    __table_args__ = (
        CheckConstraint('quantity > 0', name='ck_orders_quantity_positive'),
        # Reconciliation sums completed quantities per event
        Index(
            'ix_orders_event_id_status_completed',
            'event_id',
            postgresql_where=text("status = 'completed'"),
            sqlite_where=text("status = 'completed'"),
        ),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    event_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey('event.id'), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default='pending', nullable=False, index=True)
    channel: Mapped[str] = mapped_column(String(20), default='online', nullable=False)
    # Idempotency key: payment-provider session id, or pos_<uuid7> for box office
    external_session_id: Mapped[Optional[str]] = mapped_column(
        String(255), unique=True, nullable=True
    )
    customer_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    customer_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    amount_total: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # minor units
    user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    processed_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    processing_location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    payment_method: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    event: Mapped['EventModel'] = relationship('EventModel', back_populates='orders', lazy='noload')
