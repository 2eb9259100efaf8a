from pathlib import Path
from typing import Annotated, List, Optional

import orjson
from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Ticket Inventory Service'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # CORS
    # Comma-separated or a JSON list; NoDecode keeps the raw string for the validator
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = []

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str):
            if v.lstrip().startswith('['):
                return orjson.loads(v)
            return [i.strip() for i in v.split(',') if i.strip()]
        return v

    # PostgreSQL
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: SecretStr = SecretStr('postgres')
    POSTGRES_DB: str = 'ticket_inventory'

    # Full URL override (e.g. sqlite+aiosqlite:///./local.db for local runs)
    DATABASE_URL: Optional[str] = None

    # Namespace for all tables; None uses the connection's default schema
    DB_SCHEMA: Optional[str] = None

    # SQLAlchemy pool
    DB_POOL_SIZE: int = 10
    DB_POOL_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: int = 30  # seconds to wait for a connection
    DB_POOL_RECYCLE: int = 1800  # seconds before a connection is recycled
    DB_POOL_PRE_PING: bool = True
    DB_ECHO: bool = False

    # Store retry policy
    STORE_RETRY_MAX_ATTEMPTS: int = 3
    STORE_RETRY_BASE_DELAY: float = 0.05  # seconds, doubled on each retry
    STORE_RETRY_MAX_DELAY: float = 1.0

    # Stripe
    STRIPE_WEBHOOK_SECRET: SecretStr = SecretStr('whsec_placeholder')
    STRIPE_WEBHOOK_TOLERANCE: int = 300  # seconds

    # Create missing tables at startup (local / sqlite runs; production uses alembic)
    DB_CREATE_TABLES: bool = False

    # Tracing
    OTEL_SERVICE_NAME: str = 'ticket-inventory-service'

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:'
            f'{self.POSTGRES_PASSWORD.get_secret_value()}'
            f'@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'
        )


settings = Settings()  # type: ignore
