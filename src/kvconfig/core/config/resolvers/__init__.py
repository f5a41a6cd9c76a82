"""
Resolvers subpackage.

This subpackage contains the resolver implementations for configuration
references.
"""

from ..plugins import ResolverPlugin
from .keyvault import KeyVaultResolver

__all__ = ["ResolverPlugin", "KeyVaultResolver"]
