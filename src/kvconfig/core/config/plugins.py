"""
Plugin system for configuration resolvers.

This module provides the base class and registry for resolvers that turn a
string value found in a configuration into its real value. The built-in
resolver handles Azure Key Vault secret URLs; callers can register their own.
"""

import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class ResolverPlugin(ABC):
    """
    Abstract base class for configuration resolver plugins.

    ## Implementation Requirements

    All resolver plugins must implement:

    - `name`: Return a unique identifier for the resolver
    - `url_patterns`: Return regex patterns that this resolver can handle
    - `can_resolve`: Check if this resolver can handle a specific reference
    - `resolve`: Coroutine resolving a reference to its value

    ## Optional Methods

    - `validate_config`: Validate the resolver's configuration (default: returns True)
    - `cleanup`: Release clients or connections (default: no-op)

    ## Implementation Example

    ```python
    class EchoResolver(ResolverPlugin):
        @property
        def name(self) -> str:
            return "echo"

        @property
        def url_patterns(self) -> List[str]:
            return [r"echo://.+"]

        def can_resolve(self, reference: str) -> bool:
            return reference.startswith("echo://")

        async def resolve(self, reference: str) -> str:
            return reference[len("echo://"):]
    ```

    `can_resolve` is called for every string in a configuration and must be
    cheap and side-effect free. `resolve` may suspend on network or disk I/O
    and is called concurrently for sibling values.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this resolver plugin."""
        pass

    @property
    @abstractmethod
    def url_patterns(self) -> List[str]:
        """Return regex patterns that this resolver can handle."""
        pass

    @abstractmethod
    def can_resolve(self, reference: str) -> bool:
        """Check if this resolver can handle the given reference."""
        pass

    @abstractmethod
    async def resolve(self, reference: str) -> str:
        """Resolve the reference to its actual value."""
        pass

    def validate_config(self) -> bool:
        """Validate the resolver configuration. Override if needed."""
        return True

    async def cleanup(self) -> None:
        """
        Release any resources held by this resolver.
        Must be idempotent.
        """
        pass

    async def __aenter__(self) -> "ResolverPlugin":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.cleanup()


class ResolverRegistry:
    """Registry for managing resolver plugins."""

    def __init__(self) -> None:
        self._resolvers: Dict[str, ResolverPlugin] = {}
        self._patterns: List[tuple[re.Pattern[str], str]] = []

    def register(self, resolver: ResolverPlugin) -> None:
        """Register a resolver plugin, replacing any resolver with the same name."""
        if not resolver.validate_config():
            logger.warning(
                f"Resolver {resolver.name} has invalid configuration, skipping registration"
            )
            return

        if resolver.name in self._resolvers:
            self._patterns = [(p, n) for p, n in self._patterns if n != resolver.name]

        self._resolvers[resolver.name] = resolver
        for pattern in resolver.url_patterns:
            self._patterns.append((re.compile(pattern), resolver.name))

        logger.debug(f"Registered resolver: {resolver.name}")

    def get_resolver(self, name: str) -> Optional[ResolverPlugin]:
        """Get a resolver by name."""
        return self._resolvers.get(name)

    def find_resolver_for_reference(self, reference: str) -> Optional[ResolverPlugin]:
        """Find the resolver handling a reference, or None for plain values."""
        for pattern, resolver_name in self._patterns:
            if pattern.match(reference):
                resolver = self._resolvers.get(resolver_name)
                if resolver and resolver.can_resolve(reference):
                    return resolver
        return None

    def list_resolvers(self) -> List[str]:
        """List all registered resolver names."""
        return list(self._resolvers.keys())

    async def cleanup_all(self) -> None:
        """Clean up all registered resolvers."""
        for resolver in self._resolvers.values():
            try:
                await resolver.cleanup()
            except Exception as e:
                logger.warning(f"Error cleaning up resolver {resolver.name}: {e}")
