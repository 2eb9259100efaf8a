"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.orm_db_setting import Database
from src.platform.database.retry_policy import RetryPolicy
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.service.inventory.driven_adapter.payment.stripe_webhook_verifier_impl import (
    StripeWebhookVerifierImpl,
)
from src.service.inventory.driven_adapter.repo.event_inventory_query_repo_impl import (
    EventInventoryQueryRepoImpl,
)
from src.service.inventory.driven_adapter.repo.order_query_repo_impl import OrderQueryRepoImpl


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database (engine manager + session maker + schema namespace)
    database = providers.Singleton(Database)

    # Unit of Work - a fresh session per call, injected into use cases as a factory
    # (Provide[Container.unit_of_work.provider]) so every retry attempt starts clean
    unit_of_work = providers.Factory(
        SqlAlchemyUnitOfWork, session_maker=database.provided.session_maker
    )

    # Store retry policy (attempts / backoff from settings)
    retry_policy = providers.Singleton(RetryPolicy)

    # Query repositories (stateless - use session_factory per-request)
    event_inventory_query_repo = providers.Singleton(
        EventInventoryQueryRepoImpl, session_factory=database.provided.session
    )
    order_query_repo = providers.Singleton(
        OrderQueryRepoImpl, session_factory=database.provided.session
    )

    # Payment provider
    payment_webhook_verifier = providers.Singleton(StripeWebhookVerifierImpl)


container = Container()


def setup() -> None:
    container.config_service()
    container.database()


async def cleanup() -> None:
    await container.database().dispose()
    container.reset_singletons()
