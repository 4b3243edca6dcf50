"""npm registry access."""

from peercompat.registry.client import NpmRegistryClient, RegistryClient

__all__ = [
    "NpmRegistryClient",
    "RegistryClient",
]
