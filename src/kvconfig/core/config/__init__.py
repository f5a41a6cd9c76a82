"""
Key Vault reference resolution for configuration objects.

String values shaped like ``https://{vault}.vault.azure.net/secrets/{name}[/{version}]``
are replaced with the secret they point to, fetched through a caller-supplied
client factory and optionally cached on disk, encrypted.
"""

from .cache import SecretCache, derive_iv, derive_key
from .clients import AzureClientFactory
from .loader import load_resolver_config
from .matcher import KeyVaultReference, is_reference, match_reference
from .models import (
    KeyVaultConfigModel,
    KeyVaultLoaderOptions,
    LoggingConfigModel,
    ResolverConfigModel,
)
from .plugins import ResolverPlugin, ResolverRegistry
from .processor import (
    ResolvedReference,
    ResolverEngine,
    resolve_config,
    resolve_config_in_place,
)
from .resolvers import KeyVaultResolver

__all__ = [
    "AzureClientFactory",
    "KeyVaultConfigModel",
    "KeyVaultLoaderOptions",
    "KeyVaultReference",
    "KeyVaultResolver",
    "LoggingConfigModel",
    "ResolvedReference",
    "ResolverConfigModel",
    "ResolverEngine",
    "ResolverPlugin",
    "ResolverRegistry",
    "SecretCache",
    "derive_iv",
    "derive_key",
    "is_reference",
    "load_resolver_config",
    "match_reference",
    "resolve_config",
    "resolve_config_in_place",
]
