"""
Unit of Work Pattern - one database session and transaction per business operation

Architecture:
- UoW owns the session lifecycle (open on enter, rollback + close on exit)
- UoW owns commit/rollback
- Repositories receive the shared session from the UoW
- Use cases coordinate several repositories through one UoW
- Savepoints let a use case keep the outer transaction when an inner step fails
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, AsyncContextManager, Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


if TYPE_CHECKING:
    from src.service.inventory.app.interface.i_event_inventory_command_repo import (
        IEventInventoryCommandRepo,
    )
    from src.service.inventory.app.interface.i_event_inventory_query_repo import (
        IEventInventoryQueryRepo,
    )
    from src.service.inventory.app.interface.i_order_command_repo import IOrderCommandRepo
    from src.service.inventory.app.interface.i_order_query_repo import IOrderQueryRepo


class AbstractUnitOfWork(abc.ABC):
    """
    Abstract Unit of Work for the Inventory Service

    Responsibilities:
    - Manage database session lifecycle
    - Coordinate transactions across multiple repositories
    - Provide commit/rollback/savepoint interface

    Usage:
        async with uow:
            order = await uow.order_command_repo.create(order=...)
            await uow.event_inventory_command_repo.apply_sale(event_id=..., quantity=...)
            await uow.commit()
    """

    # Event inventory (counter projection) repositories
    event_inventory_command_repo: IEventInventoryCommandRepo
    event_inventory_query_repo: IEventInventoryQueryRepo

    # Order (ledger) repositories
    order_command_repo: IOrderCommandRepo
    order_query_repo: IOrderQueryRepo

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.rollback()

    async def commit(self) -> None:
        """Commit the transaction"""
        await self._commit()

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def savepoint(self) -> AsyncContextManager[Any]:
        """Nested transaction; rolled back alone when its block raises"""
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """
    SQLAlchemy implementation of Unit of Work

    Each ``async with`` opens a fresh session from the session maker, so a
    retried operation always starts from a clean transaction.

    Usage in use case:
        async with self.uow_factory() as uow:
            event = await uow.event_inventory_command_repo.get_for_update(event_id=...)
            await uow.commit()
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self.session_maker = session_maker
        self.session: Optional[AsyncSession] = None

    async def __aenter__(self) -> SqlAlchemyUnitOfWork:
        from src.service.inventory.driven_adapter.repo.event_inventory_command_repo_impl import (
            EventInventoryCommandRepoImpl,
        )
        from src.service.inventory.driven_adapter.repo.event_inventory_query_repo_impl import (
            EventInventoryQueryRepoImpl,
        )
        from src.service.inventory.driven_adapter.repo.order_command_repo_impl import (
            OrderCommandRepoImpl,
        )
        from src.service.inventory.driven_adapter.repo.order_query_repo_impl import (
            OrderQueryRepoImpl,
        )

        self.session = self.session_maker()

        # Create repositories with shared session
        self.event_inventory_command_repo = EventInventoryCommandRepoImpl(session=self.session)
        self.event_inventory_query_repo = EventInventoryQueryRepoImpl(session_factory=None)
        self.event_inventory_query_repo.session = self.session  # Inject session for UoW mode

        self.order_command_repo = OrderCommandRepoImpl(session=self.session)
        self.order_query_repo = OrderQueryRepoImpl(session_factory=None)
        self.order_query_repo.session = self.session

        await super().__aenter__()
        return self

    async def __aexit__(self, *args: Any) -> None:
        try:
            await super().__aexit__(*args)
        finally:
            if self.session is not None:
                await self.session.close()
                self.session = None

    def _require_session(self) -> AsyncSession:
        if self.session is None:
            raise RuntimeError('Unit of work used outside of "async with"')
        return self.session

    async def _commit(self) -> None:
        await self._require_session().commit()

    async def rollback(self) -> None:
        if self.session is not None:
            await self.session.rollback()

    def savepoint(self) -> AsyncContextManager[Any]:
        return self._require_session().begin_nested()
