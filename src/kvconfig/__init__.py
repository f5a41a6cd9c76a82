"""kvconfig - reveal Azure Key Vault secrets referenced from configuration.

Example:
    >>> from kvconfig import resolve_config
    >>> config = {"db": {"password": "https://myvault.vault.azure.net/secrets/db-password"}}
    >>> resolved = await resolve_config(config, {"client": make_client, "cache": True})
"""

from kvconfig.core.config import (
    KeyVaultLoaderOptions,
    KeyVaultReference,
    ResolverEngine,
    match_reference,
    resolve_config,
    resolve_config_in_place,
)
from kvconfig.core.version import PACKAGE_VERSION as __version__

__all__ = [
    "KeyVaultLoaderOptions",
    "KeyVaultReference",
    "ResolverEngine",
    "match_reference",
    "resolve_config",
    "resolve_config_in_place",
    "__version__",
]
