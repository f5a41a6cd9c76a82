"""
Key Vault secret reference matching.

A configuration string is a secret reference when it is exactly a Key Vault
secret URL::

    https://{vault}.vault.azure.net/secrets/{name}[/{version}]

``{vault}`` is a single host label, ``{name}`` contains no slash and
``{version}`` is everything after the following slash.
"""

import re
from dataclasses import dataclass
from typing import Any

# 1. vault base url, 2. secret name, 3. (optional) secret version
KEY_VAULT_URL_PATTERN = r"^(https://[^.]+\.vault\.azure\.net)/secrets/([^/]+?)(?:/(.*?))?$"
KEY_VAULT_URL_RE = re.compile(KEY_VAULT_URL_PATTERN)


@dataclass(frozen=True)
class KeyVaultReference:
    """Parsed identity of a secret in a Key Vault.

    Attributes:
        vault_base_url: Origin of the vault, e.g. ``https://myvault.vault.azure.net``
        secret_name: Name of the secret
        secret_version: Version of the secret, None for the latest version
    """

    vault_base_url: str
    secret_name: str
    secret_version: str | None = None

    @property
    def url(self) -> str:
        """The reference rendered back as a secret URL."""
        url = f"{self.vault_base_url}/secrets/{self.secret_name}"
        if self.secret_version:
            url += f"/{self.secret_version}"
        return url


def match_reference(value: Any) -> KeyVaultReference | None:
    """Parse a value as a Key Vault secret URL.

    Returns None for anything that is not a string of that exact shape; most
    configuration values are not references.
    """
    if not isinstance(value, str):
        return None

    match = KEY_VAULT_URL_RE.fullmatch(value)
    if not match:
        return None

    vault_base_url, secret_name, secret_version = match.groups()
    # A trailing slash leaves an empty version, which means "latest"
    return KeyVaultReference(vault_base_url, secret_name, secret_version or None)


def is_reference(value: Any) -> bool:
    """Check whether a value is a Key Vault secret URL."""
    return match_reference(value) is not None
