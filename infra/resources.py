"""Infrastructure resources: relational database and Pinecone.

This module is part of the infra layer and must not import from application features.
"""
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from langchain_openai import OpenAIEmbeddings
from langchain_pinecone import PineconeVectorStore
from pinecone import Pinecone


class DatabaseResource:
    """Database resource for dependency injection."""

    def __init__(self, database_url: str):
        self.database_url = database_url
        self.engine = None
        self.session_factory = None

    async def init(self, **engine_kwargs):
        """Initialize database connection."""
        options = {"echo": False, "pool_pre_ping": True}
        if self.database_url.startswith("postgresql"):
            options["pool_recycle"] = 3600
        options.update(engine_kwargs)
        self.engine = create_async_engine(self.database_url, **options)
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        return self

    async def create_tables(self, metadata) -> None:
        """Create any missing tables described by the ORM metadata."""
        if self.engine is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.create_all)

    def get_session(self) -> AsyncSession:
        """Get database session (synchronous accessor)."""
        if self.session_factory is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self.session_factory()

    async def shutdown(self):
        """Shutdown database connection."""
        if self.engine:
            await self.engine.dispose()


class PineconeResource:
    """Pinecone client resource: article vector index and hosted assistant.

    The client is created in ``init()`` so the container can be built without
    credentials (tests, tooling).
    """

    def __init__(
        self,
        *,
        api_key: str,
        index_name: str,
        assistant_name: str,
        openai_api_key: str,
        embedding_model: str,
        embedding_dimensions: int,
    ):
        self.api_key = api_key
        self.index_name = index_name
        self.assistant_name = assistant_name
        self.openai_api_key = openai_api_key
        self.embedding_model = embedding_model
        self.embedding_dimensions = embedding_dimensions
        self.client = None
        self._vector_store = None
        self._assistant = None

    async def init(self):
        """Initialize the Pinecone client."""
        if not self.api_key:
            raise RuntimeError("PINECONE_API_KEY is not configured")
        self.client = Pinecone(api_key=self.api_key)
        return self

    def _require_client(self) -> Pinecone:
        if self.client is None:
            raise RuntimeError("Pinecone not initialized. Call init() first.")
        return self.client

    def embeddings(self) -> OpenAIEmbeddings:
        return OpenAIEmbeddings(
            model=self.embedding_model,
            dimensions=self.embedding_dimensions,
            api_key=self.openai_api_key,
        )

    def vector_store(self) -> PineconeVectorStore:
        """LangChain vector store over the article index (cached)."""
        if self._vector_store is None:
            index = self._require_client().Index(self.index_name)
            self._vector_store = PineconeVectorStore(
                index=index, embedding=self.embeddings()
            )
        return self._vector_store

    def assistant(self):
        """Handle to the hosted Pinecone Assistant (cached)."""
        if self._assistant is None:
            self._assistant = self._require_client().assistant.Assistant(
                assistant_name=self.assistant_name
            )
        return self._assistant

    async def shutdown(self):
        """Drop client handles."""
        self.client = None
        self._vector_store = None
        self._assistant = None
        return self
