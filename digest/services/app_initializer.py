"""Wiring of page-digest components from settings."""

import httpx

from digest.classifier import ContentExtractor, create_classifier
from digest.config import Settings
from digest.credentials import CredentialStore, HostStorage, MemoryStorage, SQLiteStorage
from digest.database import create_database_engine
from digest.llm import ProviderRegistry, RequestDispatcher, default_providers
from digest.log import get_logger
from digest.presentation import KeyboardShortcut, PageSurface, PresentationStateMachine
from digest.types import SecretPrompt

from .session_controller import SessionController

logger = get_logger(__name__)


def create_storage(settings: Settings) -> HostStorage:
    """SQLite storage when a path is configured, memory otherwise."""
    if settings.storage_path is None:
        return MemoryStorage()
    engine = create_database_engine(settings.environment, settings.storage_path)
    return SQLiteStorage(engine)


def create_session_controller(
    settings: Settings,
    page: PageSurface,
    prompt: SecretPrompt,
    storage: HostStorage | None = None,
    client: httpx.AsyncClient | None = None,
    extractor: ContentExtractor | None = None,
) -> SessionController:
    """Build a controller with all collaborators.

    Args:
        settings: Application settings
        page: Host page surface
        prompt: Capability asking the user for an API key
        storage: Host storage (built from settings when None)
        client: HTTP client (a new one is created when None)
        extractor: Content extractor for extractor mode

    Returns:
        Ready to initialize session controller
    """
    registry = ProviderRegistry(
        default_providers(
            openai_base_url=settings.openai_base_url,
            gemini_base_url=settings.gemini_base_url,
        )
    )
    # Fails fast on a misconfigured default model
    registry.resolve(settings.default_model)

    dispatcher = RequestDispatcher(
        registry,
        timeout=settings.request_timeout,
        max_tokens=settings.max_tokens,
        temperature=settings.temperature,
        client=client,
    )
    presentation = PresentationStateMachine(
        page,
        models=registry.list_models(),
        selected_model=settings.default_model,
        notification_delay=settings.notification_dismiss_seconds,
    )
    credentials = CredentialStore(storage or create_storage(settings), prompt)

    logger.info(
        f"Session controller ready: mode={settings.classifier_mode.value}, "
        f"model={settings.default_model}, stream={settings.stream}"
    )
    return SessionController(
        classifier=create_classifier(settings.classifier_mode, extractor),
        credentials=credentials,
        registry=registry,
        dispatcher=dispatcher,
        presentation=presentation,
        locale=settings.locale,
        shortcut=KeyboardShortcut.parse(settings.shortcut),
        stream=settings.stream,
    )
