"""
Azure SDK client factory.

This module provides AzureClientFactory, a ready-made ``client`` option that
builds ``azure.keyvault.secrets.aio.SecretClient`` instances authenticated with
``DefaultAzureCredential`` (or a credential supplied by the caller).
"""

import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

_INSTALL_HINT = "Install with: pip install 'kvconfig[azure]'"


class AzureClientFactory:
    """Builds one asynchronous SecretClient per vault and owns their lifetime.

    Example:
        >>> async with AzureClientFactory() as factory:
        ...     resolved = await resolve_config(config, {"client": factory})
    """

    def __init__(self, credential: Optional[Any] = None, **client_kwargs: Any):
        """
        Args:
            credential: Async token credential. When None, a
                        ``DefaultAzureCredential`` is created on first use and
                        closed with the factory.
            client_kwargs: Extra keyword arguments for ``SecretClient``
        """
        self._credential = credential
        self._owns_credential = credential is None
        self._client_kwargs = client_kwargs
        self._clients: Dict[str, Any] = {}

    def __call__(self, vault_url: str) -> Any:
        client = self._clients.get(vault_url)
        if client is None:
            try:
                from azure.keyvault.secrets.aio import SecretClient
            except ImportError as e:
                raise ImportError(
                    f"azure-keyvault-secrets is required for Key Vault support. {_INSTALL_HINT}"
                ) from e

            if self._credential is None:
                self._credential = self._default_credential()

            client = SecretClient(
                vault_url=vault_url, credential=self._credential, **self._client_kwargs
            )
            self._clients[vault_url] = client
            logger.debug(f"Created Key Vault client for {vault_url}")
        return client

    @staticmethod
    def _default_credential() -> Any:
        try:
            from azure.identity.aio import DefaultAzureCredential
        except ImportError as e:
            raise ImportError(
                f"azure-identity is required for Key Vault authentication. {_INSTALL_HINT}"
            ) from e
        return DefaultAzureCredential()

    async def close(self) -> None:
        """Close every client created so far, and the credential if it was created here."""
        for vault_url, client in list(self._clients.items()):
            try:
                await client.close()
            except Exception as e:
                logger.warning(f"Error closing Key Vault client for {vault_url}: {e}")
        self._clients.clear()

        if self._owns_credential and self._credential is not None:
            await self._credential.close()
            self._credential = None

    async def __aenter__(self) -> "AzureClientFactory":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
