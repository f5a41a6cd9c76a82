"""
Azure Key Vault resolver.

This module provides the KeyVaultResolver class for resolving secret URLs like
https://myvault.vault.azure.net/secrets/db-password/0123abcd.
"""

import asyncio
import inspect
import logging
from typing import Dict, List

from ..cache import SecretCache
from ..matcher import KEY_VAULT_URL_PATTERN, KeyVaultReference, match_reference
from ..models import KeyVaultLoaderOptions
from ..plugins import ResolverPlugin
from ..types import ClientFactory, SecretClientLike

logger = logging.getLogger(__name__)


class KeyVaultResolver(ResolverPlugin):
    """Resolver for Key Vault secret URLs.

    Secrets are fetched through clients produced by ``options.client``, one
    client per vault. With ``options.cache`` enabled, values are read from and
    written to an encrypted on-disk cache before any network call.
    """

    def __init__(self, options: KeyVaultLoaderOptions):
        self.options = options
        self.cache = SecretCache(options.cache_dir) if options.cache else None
        self._clients: Dict[str, SecretClientLike] = {}
        self._clients_lock = asyncio.Lock()

    @property
    def name(self) -> str:
        return "keyvault"

    @property
    def url_patterns(self) -> List[str]:
        return [KEY_VAULT_URL_PATTERN]

    def can_resolve(self, reference: str) -> bool:
        return match_reference(reference) is not None

    async def resolve(self, reference: str) -> str:
        ref = match_reference(reference)
        if ref is None:
            raise ValueError(f"Invalid Key Vault reference: {reference}")
        return await self.get_secret(ref)

    async def get_secret(self, ref: KeyVaultReference) -> str:
        """Return the plaintext value of a referenced secret."""
        if self.cache is not None:
            cached = await self.cache.read(ref)
            if cached is not None:
                logger.debug(f"Secret {ref.secret_name} served from cache")
                return cached

        try:
            client = await self._get_client(ref.vault_base_url)
            secret = client.get_secret(ref.secret_name, version=ref.secret_version)
            if inspect.isawaitable(secret):
                secret = await secret
        except Exception as e:
            logger.error(f"Error getting secret {ref.secret_name} from key vault: {e!r}")
            raise

        value = getattr(secret, "value", None)
        if not value:
            return ""

        if self.cache is not None:
            await self.cache.write(ref, value)

        return value

    async def cleanup(self) -> None:
        """Drop client references. Clients belong to the factory that built them."""
        self._clients.clear()

    async def _get_client(self, vault_base_url: str) -> SecretClientLike:
        async with self._clients_lock:
            client = self._clients.get(vault_base_url)
            if client is None:
                factory: ClientFactory = self.options.client
                created = factory(vault_base_url)
                if inspect.isawaitable(created):
                    created = await created
                client = created
                self._clients[vault_base_url] = client
            return client
