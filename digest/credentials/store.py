"""Per-provider API key access."""

from digest.constants import CREDENTIAL_KEY_SUFFIX
from digest.log import get_logger
from digest.types import SecretPrompt

from .storage import HostStorage

logger = get_logger(__name__)


def credential_key(provider_id: str) -> str:
    """Storage key for a provider's API key, e.g. ``openai_api_key``."""
    return f"{provider_id}{CREDENTIAL_KEY_SUFFIX}"


def mask_secret(secret: str) -> str:
    """Return a loggable form of a secret."""
    if len(secret) <= 8:
        return "*" * len(secret)
    return f"{secret[:3]}...{secret[-2:]}"


class CredentialStore:
    """Reads, prompts for and stores per-provider API keys.

    Values are trimmed on the way in and out. Prompting goes through the
    injected ``prompt`` capability, which resolves to None when the user
    dismisses it.
    """

    def __init__(self, storage: HostStorage, prompt: SecretPrompt) -> None:
        self.storage = storage
        self.prompt = prompt
        self._cache: dict[str, str] = {}

    async def get_secret(self, provider_id: str, label: str | None = None) -> str | None:
        """Get the API key, prompting the user when none is stored.

        Args:
            provider_id: Provider whose key is needed
            label: Human readable provider name for the prompt

        Returns:
            The trimmed key, or None when the user gave none
        """
        cached = self._cache.get(provider_id)
        if cached:
            return cached

        stored = await self.storage.get(credential_key(provider_id))
        secret = (stored or "").strip()
        if secret:
            self._cache[provider_id] = secret
            return secret

        secret = await self._ask(provider_id, label)
        if not secret:
            logger.info(f"No API key provided for {provider_id}")
            return None

        await self.set_secret(provider_id, secret)
        return secret

    async def set_secret(self, provider_id: str, value: str) -> None:
        secret = value.strip()
        await self.storage.set(credential_key(provider_id), secret)
        self._cache[provider_id] = secret
        logger.info(f"Stored API key {mask_secret(secret)} for {provider_id}")

    async def reset_secret(self, provider_id: str, label: str | None = None) -> bool:
        """Always prompt and overwrite the stored key.

        Returns:
            True if a new key was stored, False if the prompt was dismissed
        """
        secret = await self._ask(provider_id, label)
        if not secret:
            return False
        await self.set_secret(provider_id, secret)
        return True

    async def _ask(self, provider_id: str, label: str | None) -> str:
        answer = await self.prompt(f"Please enter your {label or provider_id} API key:")
        return (answer or "").strip()
