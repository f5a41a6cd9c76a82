"""
Configuration processor resolving Key Vault references.

This module provides the ResolverEngine class that:
1. Walks a nested configuration (mappings, lists and scalars) to any depth
2. Resolves every string a registered resolver recognises
3. Either builds a resolved copy or writes results back into the original
4. Tracks which references were resolved, for debugging and reporting
"""

import asyncio
import logging
import time
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

import yaml

from .loader import load_resolver_config
from .models import KeyVaultLoaderOptions
from .plugins import ResolverPlugin, ResolverRegistry
from .resolvers import KeyVaultResolver

logger = logging.getLogger(__name__)

ConfigPath = list[str | int]


@dataclass
class ResolvedReference:
    """
    A resolved reference with tracking information.

    The resolved secret itself is not recorded.

    Attributes:
        path: Path to the value in the configuration as a list of keys/indices.
              For example, ['database', 'password'] for config['database']['password'].
        original_value: The reference string before resolution
        resolver_name: Name of the resolver that handled this reference
        resolved_at: Unix timestamp when the resolution occurred
    """

    path: ConfigPath
    original_value: str
    resolver_name: str
    resolved_at: float


class _WalkStrategy:
    """Decides where the resolved children of a container go."""

    def __init__(self, track_references: bool):
        self.track_references = track_references

    def container(self, node: Any) -> Any:
        raise NotImplementedError

    def assign(self, target: Any, key: Any, original: Any, value: Any) -> None:
        raise NotImplementedError


class _CopyStrategy(_WalkStrategy):
    """Collects children into new containers; the input is never written."""

    def container(self, node: Any) -> Any:
        if isinstance(node, list):
            return [None] * len(node)
        return {}

    def assign(self, target: Any, key: Any, original: Any, value: Any) -> None:
        target[key] = value


class _InPlaceStrategy(_WalkStrategy):
    """Writes resolved values back into the containers they came from."""

    def container(self, node: Any) -> Any:
        return node

    def assign(self, target: Any, key: Any, original: Any, value: Any) -> None:
        if value is not original:
            target[key] = value


class ResolverEngine:
    """
    Engine resolving secret references embedded in a configuration.

    Every string in the configuration is offered to the registered resolvers;
    the built-in KeyVaultResolver recognises Key Vault secret URLs such as
    ``https://myvault.vault.azure.net/secrets/db-password``. Mappings and lists
    are walked recursively and sibling values are resolved concurrently.

    ## Usage

    ```python
    options = KeyVaultLoaderOptions(client=make_client, cache=True)

    async with ResolverEngine(options) as engine:
        resolved = await engine.process_config(config)

        # or mutate the configuration itself
        await engine.process_config_in_place(config)
    ```

    ## Error Handling

    Resolution is all or nothing: the first reference that fails to resolve
    aborts the call and its exception propagates unchanged. In-place mode may
    already have written resolved values into nested containers by then.

    ## Limits

    The walk is recursive, so nesting is bounded by the interpreter's recursion
    limit. Configurations containing themselves are not supported.
    """

    def __init__(self, options: KeyVaultLoaderOptions | Mapping[str, Any] | None = None):
        """
        Initialize the ResolverEngine.

        Args:
            options: Key Vault loader options, or a mapping with the same keys
                     (``client``, ``cache``, ``cache_dir``). Without options no
                     Key Vault resolver is registered.
        """
        self.options = coerce_options(options) if options is not None else None
        self.registry = ResolverRegistry()
        self._resolved_references: list[ResolvedReference] = []
        self._initialize_resolvers()

    @classmethod
    def from_config_file(
        cls, client: Any, config_path: str | Path | None = None
    ) -> "ResolverEngine":
        """
        Create a ResolverEngine from a resolver configuration file.

        Args:
            client: Secret client factory
            config_path: Path to the resolver configuration file. If None, the
                         default locations are searched.
        """
        config = load_resolver_config(Path(config_path) if config_path else None)
        return cls(config.to_loader_options(client))

    def _initialize_resolvers(self) -> None:
        if self.options is not None:
            self.registry.register(KeyVaultResolver(self.options))

        logger.debug(f"Initialized {len(self.registry.list_resolvers())} resolvers")

    def register_resolver(self, resolver: ResolverPlugin) -> None:
        """Register a custom resolver plugin."""
        self.registry.register(resolver)
        logger.debug(f"Registered custom resolver: {resolver.name}")

    def list_resolvers(self) -> list[str]:
        """List all registered resolver names."""
        return self.registry.list_resolvers()

    async def process_config(
        self,
        config_data: Mapping[str, Any],
        track_references: bool = True,
    ) -> dict[str, Any]:
        """
        Return a resolved copy of a configuration.

        Non-matching values are carried over as the same objects; the input
        is not modified.

        Args:
            config_data: Configuration to resolve
            track_references: Whether to record resolved references

        Returns:
            New configuration with every reference replaced by its value
        """
        if track_references:
            self._resolved_references.clear()

        resolved = await self._walk(config_data, [], _CopyStrategy(track_references))
        return cast(dict[str, Any], resolved)

    async def process_config_in_place(
        self,
        config_data: MutableMapping[str, Any],
        track_references: bool = True,
    ) -> None:
        """
        Resolve a configuration by replacing references where they are.

        Args:
            config_data: Configuration to mutate
            track_references: Whether to record resolved references
        """
        if track_references:
            self._resolved_references.clear()

        await self._walk(config_data, [], _InPlaceStrategy(track_references))

    async def process_file(self, file_path: str | Path) -> dict[str, Any]:
        """
        Load a YAML (or JSON) configuration file and return it resolved.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file is not valid YAML or not a mapping
        """
        file_path = Path(file_path)
        config_data = load_config_file(file_path)
        return await self.process_config(config_data)

    async def _walk(self, node: Any, path: ConfigPath, strategy: _WalkStrategy) -> Any:
        if isinstance(node, Mapping):
            items: list[tuple[Any, Any]] = list(node.items())
        elif isinstance(node, list):
            items = list(enumerate(node))
        else:
            return await self._resolve_value(node, path, strategy)

        target = strategy.container(node)
        tasks = [
            asyncio.ensure_future(self._walk(value, path + [key], strategy))
            for key, value in items
        ]
        try:
            values = await asyncio.gather(*tasks)
        except BaseException:
            # No sibling may fetch or assign after this call has failed
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        for (key, original), value in zip(items, values):
            strategy.assign(target, key, original, value)
        return target

    async def _resolve_value(self, value: Any, path: ConfigPath, strategy: _WalkStrategy) -> Any:
        if not isinstance(value, str):
            return value

        resolver = self.registry.find_resolver_for_reference(value)
        if resolver is None:
            return value

        resolved_value = await resolver.resolve(value)

        if strategy.track_references:
            self._resolved_references.append(
                ResolvedReference(
                    path=path,
                    original_value=value,
                    resolver_name=resolver.name,
                    resolved_at=time.time(),
                )
            )

        return resolved_value

    def find_references_in_config(self, config: Any) -> list[tuple[ConfigPath, str, str]]:
        """
        Find all references in a configuration without resolving them.

        Returns:
            List of tuples (path, original_value, resolver_name)
        """
        references: list[tuple[ConfigPath, str, str]] = []

        def _scan_config(obj: Any, path: ConfigPath) -> None:
            if isinstance(obj, Mapping):
                for key, value in obj.items():
                    _scan_config(value, path + [key])
            elif isinstance(obj, list):
                for i, item in enumerate(obj):
                    _scan_config(item, path + [i])
            elif isinstance(obj, str):
                resolver = self.registry.find_resolver_for_reference(obj)
                if resolver:
                    references.append((path, obj, resolver.name))

        _scan_config(config, [])
        return references

    def get_resolved_references(self) -> list[ResolvedReference]:
        """Get all references resolved by the last tracked operation."""
        return self._resolved_references.copy()

    def get_references_by_type(self, ref_type: str) -> list[ResolvedReference]:
        """Get resolved references filtered by resolver name."""
        return [ref for ref in self._resolved_references if ref.resolver_name == ref_type]

    def get_reference_summary(self) -> dict[str, Any]:
        """Get a summary of the references resolved by the last tracked operation."""
        by_type: dict[str, int] = {}
        for ref in self._resolved_references:
            by_type[ref.resolver_name] = by_type.get(ref.resolver_name, 0) + 1

        return {
            "total_references": len(self._resolved_references),
            "by_resolver_type": by_type,
            "registered_resolvers": self.list_resolvers(),
        }

    async def cleanup(self) -> None:
        """Clean up all resolver resources."""
        await self.registry.cleanup_all()

    async def __aenter__(self) -> "ResolverEngine":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.cleanup()


def coerce_options(options: KeyVaultLoaderOptions | Mapping[str, Any]) -> KeyVaultLoaderOptions:
    """Accept loader options as a model or as a plain mapping."""
    if isinstance(options, KeyVaultLoaderOptions):
        return options
    return KeyVaultLoaderOptions.model_validate(dict(options))


def load_config_file(file_path: Path) -> dict[str, Any]:
    """Load a configuration file to resolve. JSON files parse as YAML."""
    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    try:
        with open(file_path) as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {file_path}: {e}") from e

    if config_data is None:
        return {}
    if not isinstance(config_data, dict):
        raise ValueError(f"Configuration in {file_path} must be a mapping")
    return config_data


async def resolve_config(
    config: Mapping[str, Any], options: KeyVaultLoaderOptions | Mapping[str, Any]
) -> dict[str, Any]:
    """
    Prepare a configuration for use, revealing any contained Key Vault secrets.

    Args:
        config: Configuration to resolve; left unmodified
        options: Loader options (client factory, cache settings)

    Returns:
        Resolved copy of the configuration
    """
    async with ResolverEngine(options) as engine:
        return await engine.process_config(config, track_references=False)


async def resolve_config_in_place(
    config: MutableMapping[str, Any], options: KeyVaultLoaderOptions | Mapping[str, Any]
) -> None:
    """Reveal the Key Vault secrets of a configuration by mutating it."""
    async with ResolverEngine(options) as engine:
        await engine.process_config_in_place(config, track_references=False)
