"""Provider catalog, request dispatch and response assembly."""

from .dispatcher import DispatchHandle, RequestDispatcher
from .registry import ProviderRegistry, default_providers
from .streaming import StreamAssembler, parse_complete_body, parse_provider_response

__all__ = [
    "DispatchHandle",
    "ProviderRegistry",
    "RequestDispatcher",
    "StreamAssembler",
    "default_providers",
    "parse_complete_body",
    "parse_provider_response",
]
