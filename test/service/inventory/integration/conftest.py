from collections.abc import AsyncGenerator, Callable

import pytest_asyncio

from src.platform.database.orm_db_setting import Database
from src.platform.database.retry_policy import RetryPolicy
from src.platform.database.unit_of_work import AbstractUnitOfWork, SqlAlchemyUnitOfWork
from src.service.inventory.app.command.create_event_use_case import CreateEventUseCase
from src.service.inventory.domain.entity.event_inventory_entity import EventInventory


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    db = Database()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def uow_factory(database: Database) -> Callable[[], AbstractUnitOfWork]:
    return lambda: SqlAlchemyUnitOfWork(session_maker=database.session_maker)


@pytest_asyncio.fixture
async def retry_policy() -> RetryPolicy:
    return RetryPolicy(max_attempts=3, base_delay=0, max_delay=0)


@pytest_asyncio.fixture
async def seed_event(
    uow_factory: Callable[[], AbstractUnitOfWork], retry_policy: RetryPolicy
) -> Callable[..., object]:
    async def _seed(*, tickets_total: int, name: str = 'Spring Showcase') -> EventInventory:
        use_case = CreateEventUseCase(uow_factory=uow_factory, retry_policy=retry_policy)
        return await use_case.execute(name=name, tickets_total=tickets_total)

    return _seed
