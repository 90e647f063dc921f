"""Version token resolution and lifecycle classification."""

import re
from enum import Enum
from typing import List, Optional

from .config import SemanticVersion, VersionRegistry

MINOR_PATTERN = re.compile(r"(\d+)\.(\d+)", re.ASCII)


class VersionStatus(str, Enum):
    STABLE = "stable"
    SUPPORTED = "supported"
    DEPRECATED = "deprecated"
    SUNSETTED = "sunsetted"
    UNKNOWN = "unknown"


SERVABLE_STATUSES = (VersionStatus.STABLE, VersionStatus.SUPPORTED, VersionStatus.DEPRECATED)


class VersionResolver:
    """Maps request-supplied version tokens to concrete versions.

    Every method is a pure function of the injected registry, so a single
    instance is shared by all requests without locking.
    """

    def __init__(self, registry: VersionRegistry):
        self.registry = registry

    @property
    def stable(self) -> str:
        return self.registry.stable

    def known_versions(self) -> List[str]:
        return self.registry.known_versions()

    def resolve(self, token: Optional[str]) -> str:
        """Resolve a token such as '', 'v0', '0.2', 'v0.1.0' to a concrete version.

        Never raises: a token that cannot be resolved comes back unchanged
        and classifies as UNKNOWN.
        """
        if not token:
            return self.registry.stable

        aliases = self.registry.aliases
        normalized = token if token.startswith("v") else f"v{token}"
        if token in aliases:
            return aliases[token]
        if normalized in aliases:
            return aliases[normalized]

        bare = normalized[1:]
        if SemanticVersion.is_valid(bare) and bare in self.known_versions():
            return bare

        if MINOR_PATTERN.fullmatch(bare):
            return self.latest_patch_for(bare) or bare

        return token

    def latest_patch_for(self, minor: str) -> Optional[str]:
        """Highest known X.Y.Z for an 'X.Y' key, or None when nothing matches.

        Sunsetted versions are eligible.
        """
        match = MINOR_PATTERN.fullmatch(minor.lstrip("v"))
        if not match:
            return None
        major, minor_number = int(match.group(1)), int(match.group(2))

        best: Optional[SemanticVersion] = None
        for version in self.known_versions():
            parsed = SemanticVersion.parse(version)
            if parsed.major != major or parsed.minor != minor_number:
                continue
            if best is None or parsed > best:
                best = parsed

        return best.full if best else None

    def get_status(self, version: str) -> VersionStatus:
        # STABLE and SUNSETTED win over the deprecation window overlap
        registry = self.registry
        if version == registry.stable:
            return VersionStatus.STABLE
        if version in registry.sunsetted:
            return VersionStatus.SUNSETTED
        if version in registry.deprecated:
            return VersionStatus.DEPRECATED
        if version in registry.supported:
            return VersionStatus.SUPPORTED
        return VersionStatus.UNKNOWN

    def is_servable(self, version: str) -> bool:
        return self.get_status(version) in SERVABLE_STATUSES
