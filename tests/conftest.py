"""Shared fixtures: in-memory database and a stub answering pipeline."""
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from api.shared.entities.registry import BaseEntity
from rag.sources import Source
from tests.fakes import StubPipeline


@pytest_asyncio.fixture
async def db_session():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(BaseEntity.metadata.create_all)
    session_factory = async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def stub_pipeline() -> StubPipeline:
    return StubPipeline(
        answer="Microgravity reduces bone density.",
        sources=[
            Source(title="Bone loss in spaceflight", link="https://example.org/PMC1/"),
            Source(title="Mouse femur study", link="https://example.org/PMC2/"),
        ],
    )
