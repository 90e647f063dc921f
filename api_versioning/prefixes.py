"""Derivation of the URL prefixes every route group is mounted under."""

from typing import List

from .config import SemanticVersion, VersionRegistry


def get_version_prefixes(registry: VersionRegistry) -> List[str]:
    """Get all version prefixes that should be registered.

    Order is stable for a given registry: exact versions ('v0.1.0'),
    then minor aliases ('v0.1'), then static aliases ('v0'), then the
    unversioned default ('').
    """
    prefixes: List[str] = []

    def add(prefix: str):
        if prefix not in prefixes:
            prefixes.append(prefix)

    known = registry.known_versions()

    for version in known:
        add(f"v{version}")

    for version in known:
        add(f"v{SemanticVersion.parse(version).minor_key}")

    for alias in registry.aliases:
        add(alias)

    add("")
    return prefixes
