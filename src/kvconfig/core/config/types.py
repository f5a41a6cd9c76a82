"""
Type definitions for the secret client collaborator.

Any object with a matching ``get_secret`` works as a client; the Azure SDK's
``azure.keyvault.secrets.aio.SecretClient`` is the reference shape.
"""

from collections.abc import Awaitable, Callable
from typing import Any, Optional, Protocol, Union


class KeyVaultSecretLike(Protocol):
    """A fetched secret. Only ``value`` is read; it may be ``None``."""

    @property
    def value(self) -> Optional[str]: ...


class SecretClientLike(Protocol):
    """Subset of ``azure.keyvault.secrets.aio.SecretClient`` used for resolution."""

    def get_secret(
        self, name: str, version: Optional[str] = None, **kwargs: Any
    ) -> Awaitable[KeyVaultSecretLike]: ...


# Factory taking a vault base URL and returning a client, synchronously or not
ClientFactory = Callable[[str], Union[SecretClientLike, Awaitable[SecretClientLike]]]
