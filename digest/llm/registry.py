"""Catalog of supported AI providers."""

from digest.exceptions import UnknownModelError
from digest.log import get_logger
from digest.models import AuthParts, ProviderDescriptor
from digest.types import AuthScheme, ProviderFamily

logger = get_logger(__name__)

DEFAULT_OPENAI_BASE_URL = "https://api.openai.com"
DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com"


def default_providers(
    openai_base_url: str = DEFAULT_OPENAI_BASE_URL,
    gemini_base_url: str = DEFAULT_GEMINI_BASE_URL,
) -> list[ProviderDescriptor]:
    """Built-in provider descriptors."""
    return [
        ProviderDescriptor(
            id="openai",
            display_name="OpenAI",
            models=("gpt-4o-mini", "gpt-4o"),
            endpoint_template="{base_url}/v1/chat/completions",
            base_url=openai_base_url.rstrip("/"),
            auth_scheme=AuthScheme.BEARER_HEADER,
            family=ProviderFamily.CHAT,
            supports_streaming=True,
        ),
        ProviderDescriptor(
            id="gemini",
            display_name="Gemini",
            models=("gemini-2.0-flash", "gemini-1.5-flash", "gemini-1.5-pro"),
            endpoint_template="{base_url}/v1beta/models/{model}:generateContent",
            base_url=gemini_base_url.rstrip("/"),
            auth_scheme=AuthScheme.QUERY_PARAM,
            auth_param="key",
            family=ProviderFamily.DOCUMENT,
        ),
    ]


class ProviderRegistry:
    """Resolves models to providers and knows how each one authenticates."""

    def __init__(self, providers: list[ProviderDescriptor] | None = None) -> None:
        self._providers: dict[str, ProviderDescriptor] = {}
        self._models: dict[str, ProviderDescriptor] = {}
        for descriptor in providers or default_providers():
            self.register(descriptor)

    def register(self, descriptor: ProviderDescriptor) -> None:
        self._providers[descriptor.id] = descriptor
        for model in descriptor.models:
            if model in self._models:
                logger.warning(
                    f"Model {model} re-registered by {descriptor.id}, "
                    f"was {self._models[model].id}"
                )
            self._models[model] = descriptor

    def get(self, provider_id: str) -> ProviderDescriptor:
        if provider_id not in self._providers:
            raise UnknownModelError(f"Unknown provider: {provider_id}")
        return self._providers[provider_id]

    def resolve(self, model_id: str) -> ProviderDescriptor:
        """Find the provider serving a model.

        Raises:
            UnknownModelError: If no provider lists the model
        """
        try:
            return self._models[model_id]
        except KeyError:
            raise UnknownModelError(f"Unknown model: {model_id}") from None

    def list_providers(self) -> list[ProviderDescriptor]:
        return list(self._providers.values())

    def list_models(self) -> list[str]:
        return list(self._models)

    @staticmethod
    def endpoint_for(descriptor: ProviderDescriptor, model_id: str) -> str:
        return descriptor.endpoint_template.format(
            base_url=descriptor.base_url, model=model_id
        )

    @staticmethod
    def build_auth(descriptor: ProviderDescriptor, secret: str) -> AuthParts:
        """Place the secret where the provider expects it."""
        if descriptor.auth_scheme == AuthScheme.BEARER_HEADER:
            return AuthParts(headers={"Authorization": f"Bearer {secret}"})
        return AuthParts(params={descriptor.auth_param: secret})
