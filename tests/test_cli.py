"""Tests for the kvconfig CLI."""

import json
import logging
import os
import stat
import sys

import pytest
import yaml
from click.testing import CliRunner

from kvconfig.__main__ import cli

SECRET_URL = "https://myvault.vault.azure.net/secrets/foo/baadf00d"


class FakeAzureClientFactory:
    """Replaces AzureClientFactory so no Azure credential is needed."""

    instances: list["FakeAzureClientFactory"] = []

    def __init__(self, factory):
        self.factory = factory
        self.closed = False
        FakeAzureClientFactory.instances.append(self)

    def __call__(self, vault_url):
        return self.factory(vault_url)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.closed = True


@pytest.fixture
def runner():
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    """The CLI reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def fake_azure(monkeypatch, client_factory):
    FakeAzureClientFactory.instances = []
    monkeypatch.setattr(
        "kvconfig.interfaces.cli.resolve.AzureClientFactory",
        lambda: FakeAzureClientFactory(client_factory),
    )
    return client_factory


@pytest.fixture
def app_config(tmp_path):
    path = tmp_path / "app.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "database": {"host": "db.local", "password": SECRET_URL},
                "replicas": [SECRET_URL, "plain"],
                "port": 5432,
            }
        )
    )
    return path


class TestResolveCommand:
    def test_prints_resolved_yaml(self, runner, fake_azure, app_config):
        result = runner.invoke(cli, ["resolve", str(app_config)])

        assert result.exit_code == 0, result.output
        assert yaml.safe_load(result.stdout) == {
            "database": {"host": "db.local", "password": "secretValue"},
            "replicas": ["secretValue", "plain"],
            "port": 5432,
        }
        assert len(fake_azure.calls) == 2
        assert FakeAzureClientFactory.instances[0].closed

    def test_json_output(self, runner, fake_azure, app_config):
        result = runner.invoke(cli, ["resolve", str(app_config), "--json-output"])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["status"] == "ok"
        assert payload["result"]["database"]["password"] == "secretValue"

    def test_cache_flags(self, runner, fake_azure, app_config, tmp_path):
        cache_dir = tmp_path / "cli-cache"
        args = ["resolve", str(app_config), "--cache", "--cache-dir", str(cache_dir)]

        assert runner.invoke(cli, args).exit_code == 0
        # Both references miss the empty cache and are fetched concurrently
        assert len(fake_azure.calls) == 2

        assert runner.invoke(cli, args).exit_code == 0
        assert len(fake_azure.calls) == 2
        assert len(list(cache_dir.iterdir())) == 1

    def test_cache_from_resolver_config(self, runner, fake_azure, app_config, tmp_path):
        cache_dir = tmp_path / "configured-cache"
        resolver_config = tmp_path / "resolver.yaml"
        resolver_config.write_text(
            yaml.safe_dump({"config": {"keyvault": {"cache": True, "cache_dir": str(cache_dir)}}})
        )
        args = ["resolve", str(app_config), "--resolver-config", str(resolver_config)]

        assert runner.invoke(cli, args).exit_code == 0
        assert runner.invoke(cli, args).exit_code == 0
        assert len(fake_azure.calls) == 2

        # --no-cache overrides the resolver config
        assert runner.invoke(cli, args + ["--no-cache"]).exit_code == 0
        assert len(fake_azure.calls) == 4

    def test_writes_output_file(self, runner, fake_azure, app_config, tmp_path):
        output = tmp_path / "resolved.yaml"

        result = runner.invoke(cli, ["resolve", str(app_config), "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert yaml.safe_load(output.read_text())["database"]["password"] == "secretValue"
        if sys.platform != "win32":
            assert stat.S_IMODE(os.stat(output).st_mode) == 0o600

    def test_missing_file(self, runner, fake_azure, tmp_path):
        result = runner.invoke(cli, ["resolve", str(tmp_path / "missing.yaml")])

        assert result.exit_code != 0
        assert "Configuration file not found" in result.output

    def test_missing_file_json(self, runner, fake_azure, tmp_path):
        result = runner.invoke(cli, ["resolve", str(tmp_path / "missing.yaml"), "--json-output"])

        assert result.exit_code != 0
        payload = json.loads(result.stdout)
        assert payload["status"] == "error"
        assert "Configuration file not found" in payload["error"]

    def test_remote_failure(self, runner, monkeypatch, make_client_factory, app_config):
        failing = make_client_factory(error=RuntimeError("vault unavailable"))
        monkeypatch.setattr(
            "kvconfig.interfaces.cli.resolve.AzureClientFactory",
            lambda: FakeAzureClientFactory(failing),
        )

        result = runner.invoke(cli, ["resolve", str(app_config)])

        assert result.exit_code != 0
        assert "vault unavailable" in result.output


class TestRefsCommand:
    def test_lists_references(self, runner, app_config):
        result = runner.invoke(cli, ["refs", str(app_config)])

        assert result.exit_code == 0, result.output
        assert "Found 2 Key Vault reference(s)" in result.output
        assert f"database.password: {SECRET_URL}" in result.output
        assert f"replicas[0]: {SECRET_URL}" in result.output

    def test_json_output(self, runner, app_config):
        result = runner.invoke(cli, ["refs", str(app_config), "--json-output"])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["result"] == [
            {
                "path": ["database", "password"],
                "reference": SECRET_URL,
                "resolver": "keyvault",
                "vault": "https://myvault.vault.azure.net",
                "secret": "foo",
                "version": "baadf00d",
            },
            {
                "path": ["replicas", 0],
                "reference": SECRET_URL,
                "resolver": "keyvault",
                "vault": "https://myvault.vault.azure.net",
                "secret": "foo",
                "version": "baadf00d",
            },
        ]

    def test_no_references(self, runner, tmp_path):
        path = tmp_path / "plain.yaml"
        path.write_text("a: 1\n")

        result = runner.invoke(cli, ["refs", str(path)])

        assert result.exit_code == 0
        assert "No Key Vault references found" in result.output


def test_help_without_subcommand(runner):
    result = runner.invoke(cli, [])
    assert result.exit_code == 0
    assert "resolve" in result.output
    assert "refs" in result.output
