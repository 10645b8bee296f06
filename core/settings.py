from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, PostgresDsn, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CustomSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


class AppSettings(CustomSettings):
    ENVIRONMENT: Literal["local", "dev", "prod"] = Field(default="local")
    LOG_LEVEL: str = Field(default="INFO")
    JSON_LOGS: bool = Field(default=True)


class PgDbSettings(CustomSettings):
    POSTGRES_ENGINE: str = Field(default="postgresql+asyncpg")
    POSTGRES_USER: str = Field(default="postgres")
    POSTGRES_PASSWORD: SecretStr = Field(default="postgres")
    POSTGRES_DB: str = Field(default="articles_chat")
    POSTGRES_HOST: str = Field(default="localhost")
    POSTGRES_PORT: int = Field(default=5432)
    DATABASE_URL: PostgresDsn | str = Field(default="")
    # Schema migrations are out of scope; tables come from ORM metadata.
    CREATE_TABLES: bool = Field(default=True)

    @model_validator(mode="before")
    def validate_postgres_dsn(cls, data: dict):
        if isinstance(data, dict) and not data.get("DATABASE_URL"):
            _built_uri = PostgresDsn.build(
                scheme=data.get("POSTGRES_ENGINE", "postgresql+asyncpg"),
                username=data.get("POSTGRES_USER", "postgres"),
                password=data.get("POSTGRES_PASSWORD", "postgres"),
                host=data.get("POSTGRES_HOST", "localhost"),
                port=int(data.get("POSTGRES_PORT", 5432)),
                path=data.get("POSTGRES_DB", "articles_chat"),
            ).unicode_string()
            data["DATABASE_URL"] = _built_uri
        return data


class OpenAISettings(CustomSettings):
    OPENAI_API_KEY: SecretStr = Field(default="")
    CHAT_MODEL: str = Field(default="gpt-4o-mini")
    EMBEDDING_MODEL: str = Field(default="text-embedding-3-small")
    # Must match the dimension of the Pinecone article index
    EMBEDDING_DIMENSIONS: int = Field(default=512)
    TEMPERATURE: float = Field(default=0.1)


class PineconeSettings(CustomSettings):
    """Configuration for the managed vector index and the hosted assistant.

    Env vars:
    - PINECONE_API_KEY
    - PINECONE_INDEX
    - PINECONE_ASSISTANT_NAME
    - PINECONE_ASSISTANT_MODEL
    """

    PINECONE_API_KEY: SecretStr = Field(default="")
    PINECONE_INDEX: str = Field(default="agave-atlas")
    ASSISTANT_NAME: str = Field(
        default="nasaspace", validation_alias="PINECONE_ASSISTANT_NAME"
    )
    ASSISTANT_MODEL: str = Field(
        default="gpt-4o", validation_alias="PINECONE_ASSISTANT_MODEL"
    )


class ChatSettings(CustomSettings):
    """Configuration for the chat endpoint.

    Set via env vars (optional):
    - CHAT_MODE: assistant | rag | agent
    - CHAT_TOP_K
    - CHAT_HISTORY_TURNS
    - CHAT_MAX_TOOL_ROUNDS
    - CHAT_REPORT_ENABLED
    """

    model_config = SettingsConfigDict(
        env_prefix="CHAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    MODE: Literal["assistant", "rag", "agent"] = Field(default="agent")
    TOP_K: int = Field(default=5)
    HISTORY_TURNS: int = Field(default=10)
    MAX_TOOL_ROUNDS: int = Field(default=2)
    DEFAULT_TITLE: str = Field(default="New conversation")
    TITLE_MAX_LENGTH: int = Field(default=60)
    REPORT_ENABLED: bool = Field(default=True)


class AuthSettings(CustomSettings):
    # Header set by the upstream session provider with the signed-in user id
    USER_HEADER: str = Field(default="X-User-Id", validation_alias="AUTH_USER_HEADER")


class IngestionSettings(CustomSettings):
    """Configuration for the batch ingestion commands.

    Set via env vars with the INGEST_ prefix, e.g. INGEST_CSV_PATH.
    """

    model_config = SettingsConfigDict(
        env_prefix="INGEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    CSV_PATH: str = Field(default="assets/SB_publication_PMC.csv")
    TEMP_DIR: str = Field(default="temp_pdfs")
    REQUEST_TIMEOUT: float = Field(default=60.0)
    DELAY_SECONDS: float = Field(default=3.0)
    WEB_DELAY_SECONDS: float = Field(default=1.0)
    RATE_LIMIT_WAIT_SECONDS: float = Field(default=30.0)
    MAX_FILE_BYTES: int = Field(default=100 * 1024 * 1024)
    OVERSIZED_LOG_PATH: str = Field(default="oversized_files.log")
    CHUNK_SIZE: int = Field(default=1000)
    CHUNK_OVERLAP: int = Field(default=200)
    USER_AGENT: str = Field(
        default="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    )


class UiSettings(CustomSettings):
    """Configuration for Streamlit UI to reach API endpoints.

    Set via env vars:
    - API_BASE_URL
    - UI_USER_ID
    """

    API_BASE_URL: str = Field(default="http://localhost:8000")
    USER_ID: str = Field(default="local-user", validation_alias="UI_USER_ID")


class Settings(BaseModel):
    APP: AppSettings = Field(default_factory=AppSettings)
    DATABASE: PgDbSettings = Field(default_factory=PgDbSettings)
    OPENAI: OpenAISettings = Field(default_factory=OpenAISettings)
    PINECONE: PineconeSettings = Field(default_factory=PineconeSettings)
    CHAT: ChatSettings = Field(default_factory=ChatSettings)
    AUTH: AuthSettings = Field(default_factory=AuthSettings)
    INGESTION: IngestionSettings = Field(default_factory=IngestionSettings)
    UI: UiSettings = Field(default_factory=UiSettings)


@lru_cache
def get_settings() -> Settings:
    return Settings()


SETTINGS = get_settings()
