"""Pytest configuration and fixtures."""

import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DEBUG"] = "false"
os.environ["DEX_SANDBOX"] = "true"

from agenpay.config import DexConfig
from agenpay.ledger.models import Base
from agenpay.ledger.repository import TransactionRepository
from agenpay.routing.sandbox import SandboxQuoteProvider
from agenpay.services.dex_service import DexService


@pytest.fixture
def live_config() -> DexConfig:
    """Live configuration with dummy credentials."""
    return DexConfig(
        api_key="test-key",
        secret_key="test-secret",
        passphrase="test-passphrase",
        project_id="test-project",
        base_url="https://dex.example.com/api/v5/dex",
        sandbox=False,
    )


@pytest_asyncio.fixture
async def db_engine():
    """Create in-memory database engine for testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for testing."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def tx_repo(db_session: AsyncSession) -> TransactionRepository:
    """Create transaction repository for testing."""
    return TransactionRepository(db_session)


@pytest.fixture
def sandbox_provider() -> SandboxQuoteProvider:
    return SandboxQuoteProvider()


@pytest.fixture
def dex_service(sandbox_provider, session_factory) -> DexService:
    """DEX service in sandbox mode backed by the in-memory ledger."""
    return DexService(sandbox_provider, session_factory=session_factory)
