"""kvconfig core - configuration resolution and shared utilities.

## Key Modules

### Configuration (`kvconfig.core.config`)
- `ResolverEngine`: Walks a configuration tree and resolves Key Vault references
- `KeyVaultResolver`: Matches `https://{vault}.vault.azure.net/secrets/...` URLs
  and fetches the secret, optionally through an encrypted on-disk cache
- `SecretCache`: Content-addressed, encrypted cache of resolved secrets
- Configuration loading and validation

### Version (`kvconfig.core.version`)
- `PACKAGE_NAME`: The package name ("kvconfig")
- `PACKAGE_VERSION`: The current package version
- `get_package_info()`: Get both name and version as a tuple

## Quick Example

```python
from kvconfig.core.config import KeyVaultLoaderOptions, ResolverEngine

options = KeyVaultLoaderOptions(client=make_client, cache=True)

async with ResolverEngine(options) as engine:
    resolved = await engine.process_config(
        {"database": {"password": "https://myvault.vault.azure.net/secrets/db-password"}}
    )
```
"""

from .version import PACKAGE_NAME, PACKAGE_VERSION, get_package_info

__all__ = ["PACKAGE_NAME", "PACKAGE_VERSION", "get_package_info"]
