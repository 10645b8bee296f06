from __future__ import annotations

from dependency_injector import containers, providers

from core.settings import SETTINGS
from infra.resources import DatabaseResource, PineconeResource


class InfrastructureContainer(containers.DeclarativeContainer):
    # Database
    database = providers.Resource(
        DatabaseResource,
        database_url=str(SETTINGS.DATABASE.DATABASE_URL),
    )

    # Pinecone: article vector index + hosted assistant
    pinecone = providers.Resource(
        PineconeResource,
        api_key=SETTINGS.PINECONE.PINECONE_API_KEY.get_secret_value(),
        index_name=SETTINGS.PINECONE.PINECONE_INDEX,
        assistant_name=SETTINGS.PINECONE.ASSISTANT_NAME,
        openai_api_key=SETTINGS.OPENAI.OPENAI_API_KEY.get_secret_value(),
        embedding_model=SETTINGS.OPENAI.EMBEDDING_MODEL,
        embedding_dimensions=SETTINGS.OPENAI.EMBEDDING_DIMENSIONS,
    )


class ServiceContainer(containers.DeclarativeContainer):
    """Application services - depends on infrastructure."""

    infrastructure = providers.DependenciesContainer()

    # Services
    conversation_service = providers.Factory(
        "api.features.conversation.service.ConversationService",
        default_title=SETTINGS.CHAT.DEFAULT_TITLE,
    )

    if SETTINGS.CHAT.REPORT_ENABLED:
        report_generator = providers.Factory(
            "rag.report.html_report.ReportGenerator",
        )
    else:
        report_generator = providers.Object(None)

    # Answering pipeline, picked by CHAT.MODE
    query_pipeline = providers.Selector(
        providers.Object(SETTINGS.CHAT.MODE),
        rag=providers.Factory(
            "rag.pipeline.query_pipeline.QueryPipeline",
            pinecone=infrastructure.pinecone,
            top_k=SETTINGS.CHAT.TOP_K,
            history_turns=SETTINGS.CHAT.HISTORY_TURNS,
        ),
        agent=providers.Factory(
            "rag.pipeline.agent_pipeline.AgentPipeline",
            pinecone=infrastructure.pinecone,
            top_k=SETTINGS.CHAT.TOP_K,
            history_turns=SETTINGS.CHAT.HISTORY_TURNS,
            max_tool_rounds=SETTINGS.CHAT.MAX_TOOL_ROUNDS,
        ),
        assistant=providers.Factory(
            "rag.pipeline.assistant_pipeline.AssistantPipeline",
            pinecone=infrastructure.pinecone,
            model=SETTINGS.PINECONE.ASSISTANT_MODEL,
            history_turns=SETTINGS.CHAT.HISTORY_TURNS,
        ),
    )

    chat_service = providers.Factory(
        "api.features.chat.service.ChatService",
        pipeline=query_pipeline,
        conversation_service=conversation_service,
        report_generator=report_generator,
        history_turns=SETTINGS.CHAT.HISTORY_TURNS,
        title_max_length=SETTINGS.CHAT.TITLE_MAX_LENGTH,
    )


class ControllerContainer(containers.DeclarativeContainer):
    """Controller-specific dependencies."""

    services = providers.DependenciesContainer()

    # Controllers
    conversation_controller = providers.Factory(
        "api.features.conversation.controller.ConversationController",
        conversation_service=services.conversation_service,
    )

    chat_controller = providers.Factory(
        "api.features.chat.controller.ChatController",
        chat_service=services.chat_service,
    )


class ApplicationContainer(containers.DeclarativeContainer):
    """Main application container composing all sub-containers."""

    wiring_config = containers.WiringConfiguration(
        modules=[
            "api.main",
            "api.shared.db",
            "api.features.conversation.router",
            "api.features.chat.router",
        ]
    )

    infrastructure = providers.Container(InfrastructureContainer)
    services = providers.Container(ServiceContainer, infrastructure=infrastructure)
    controllers = providers.Container(ControllerContainer, services=services)
