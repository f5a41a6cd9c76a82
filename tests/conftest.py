"""
Global pytest configuration and fixtures.
"""

import asyncio
from dataclasses import dataclass

import pytest

VAULT_URL = "https://myvault.vault.azure.net"
SECRET_URL = f"{VAULT_URL}/secrets/foo/baadf00d"
UNVERSIONED_SECRET_URL = f"{VAULT_URL}/secrets/foo"


@dataclass
class FakeSecret:
    value: str | None


class FakeSecretClient:
    """Stands in for azure.keyvault.secrets.aio.SecretClient."""

    def __init__(self, factory: "FakeClientFactory", vault_url: str):
        self.factory = factory
        self.vault_url = vault_url

    async def get_secret(self, name, version=None, **kwargs):
        self.factory.calls.append((self.vault_url, name, version))
        if self.factory.error is not None:
            raise self.factory.error
        if name in self.factory.errors:
            raise self.factory.errors[name]
        delay = self.factory.delays.get(name)
        if delay:
            await asyncio.sleep(delay)
        if (name, version) in self.factory.secrets:
            return FakeSecret(self.factory.secrets[(name, version)])
        return FakeSecret(self.factory.secrets.get(name))


class FakeClientFactory:
    """Client factory recording every client built and every secret fetched.

    ``secrets`` maps a name, or a (name, version) pair, to the value returned.
    ``errors`` maps a name to the exception its fetch raises.
    """

    def __init__(self, secrets=None, error=None, delays=None, errors=None):
        self.secrets = secrets if secrets is not None else {"foo": "secretValue"}
        self.error = error
        self.delays = delays or {}
        self.errors = errors or {}
        self.calls: list[tuple[str, str, str | None]] = []
        self.created: list[str] = []

    def __call__(self, vault_url):
        self.created.append(vault_url)
        return FakeSecretClient(self, vault_url)


@pytest.fixture
def make_client_factory():
    """Build fake client factories with custom secrets, errors or delays."""
    return FakeClientFactory


@pytest.fixture
def client_factory():
    """Client factory resolving secret ``foo`` to ``secretValue``."""
    return FakeClientFactory()


@pytest.fixture
def cache_dir(tmp_path):
    """Per-test cache directory."""
    path = tmp_path / "kv-cache"
    path.mkdir()
    return path


@pytest.fixture(autouse=True)
def isolate_resolver_config(tmp_path, monkeypatch):
    """Keep tests away from the user's resolver config and environment flags."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("KVCONFIG_RESOLVER_CONFIG", raising=False)
    monkeypatch.delenv("KVCONFIG_DEBUG", raising=False)
    monkeypatch.chdir(tmp_path)
