"""Centralized dependency injection container."""
from dependency_injector import containers, providers

from core.settings import SETTINGS
from infra.resources import DatabaseResource, build_chat_model


class InfrastructureContainer(containers.DeclarativeContainer):
    """Process-wide resources shared by every request."""

    settings = providers.Object(SETTINGS)

    # Database
    database = providers.Resource(
        DatabaseResource,
        database_url=str(SETTINGS.DATABASE.DATABASE_URL),
    )

    # Model provider clients
    chat_model = providers.Singleton(
        build_chat_model,
        model=SETTINGS.LLM.CHAT_MODEL,
        api_key=SETTINGS.LLM.LLM_API_KEY.get_secret_value(),
        base_url=SETTINGS.LLM.LLM_BASE_URL,
        temperature=SETTINGS.LLM.TEMPERATURE,
    )

    title_model = providers.Singleton(
        build_chat_model,
        model=SETTINGS.LLM.TITLE_MODEL,
        api_key=SETTINGS.LLM.LLM_API_KEY.get_secret_value(),
        base_url=SETTINGS.LLM.LLM_BASE_URL,
        temperature=SETTINGS.LLM.TEMPERATURE,
    )


class ServiceContainer(containers.DeclarativeContainer):
    """Application services - depends on infrastructure."""

    infrastructure = providers.DependenciesContainer()

    session_resolver = providers.Singleton(
        "api.features.auth.service.SessionResolver",
        cookie_name=SETTINGS.AUTH.SESSION_COOKIE_NAME,
    )

    title_generator = providers.Singleton(
        "api.features.chat.title_generator.TitleGenerator",
        chat_model=infrastructure.title_model,
        model_name=SETTINGS.LLM.TITLE_MODEL,
    )

    chat_service = providers.Singleton(
        "api.features.chat.service.ChatService",
        database=infrastructure.database,
        chat_model=infrastructure.chat_model,
        title_generator=title_generator,
        model_name=SETTINGS.LLM.CHAT_MODEL,
    )


class ControllerContainer(containers.DeclarativeContainer):
    """Controller-specific dependencies."""

    services = providers.DependenciesContainer()

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
            "api.features.auth.dependencies",
            "api.features.chat.router",
        ]
    )

    infrastructure = providers.Container(InfrastructureContainer)
    services = providers.Container(ServiceContainer, infrastructure=infrastructure)
    controllers = providers.Container(ControllerContainer, services=services)
