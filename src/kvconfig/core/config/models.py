"""Pydantic models for resolver configuration.

This module defines the options consumed by a single resolution call and the
model of the resolver configuration file.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any

from pydantic import Field

from kvconfig.models import KvBaseModel


class KeyVaultLoaderOptions(KvBaseModel):
    """Options read once per resolution call.

    Attributes:
        client: Factory taking a vault base URL (e.g. ``https://myvault.vault.azure.net``)
            and returning a secret client, or an awaitable resolving to one.
            The client must expose ``async get_secret(name, version=None)``.
        cache: Whether resolved secrets are cached on disk, encrypted.
            Useful during development; entries never expire.
        cache_dir: Directory holding cache files. Defaults to the platform
            temporary directory.

    Example:
        >>> from azure.keyvault.secrets.aio import SecretClient
        >>> options = KeyVaultLoaderOptions(
        ...     client=lambda url: SecretClient(vault_url=url, credential=credential),
        ...     cache=True,
        ... )
    """

    client: Callable[..., Any]
    cache: bool = False
    cache_dir: Path | None = None


class KeyVaultConfigModel(KvBaseModel):
    """Key Vault settings from the resolver configuration file.

    Attributes:
        cache: Whether to cache resolved secrets on disk
        cache_dir: Cache directory; the platform temporary directory when unset

    Example:
        >>> config = KeyVaultConfigModel(cache=True, cache_dir="/var/tmp/kvconfig")
    """

    cache: bool = False
    cache_dir: str | None = None


class LoggingConfigModel(KvBaseModel):
    """Logging settings from the resolver configuration file."""

    level: str | None = None
    path: str | None = None
    max_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    backup_count: int = Field(default=5, ge=0)


class ResolverConfigModel(KvBaseModel):
    """Root configuration for the resolver.

    ```yaml
    config:
      keyvault:
        cache: true
        cache_dir: "/var/tmp/kvconfig"
      logging:
        level: "INFO"
        path: "/var/log/kvconfig.log"
    ```
    """

    keyvault: KeyVaultConfigModel = Field(default_factory=KeyVaultConfigModel)
    logging: LoggingConfigModel = Field(default_factory=LoggingConfigModel)

    def to_loader_options(self, client: Callable[..., Any]) -> KeyVaultLoaderOptions:
        """Build per-call options from this configuration and a client factory."""
        cache_dir = Path(self.keyvault.cache_dir).expanduser() if self.keyvault.cache_dir else None
        return KeyVaultLoaderOptions(client=client, cache=self.keyvault.cache, cache_dir=cache_dir)
