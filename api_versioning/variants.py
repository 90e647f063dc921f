"""Per-version strategy tables for response shapes."""

import logging
from typing import Dict, Generic, Iterable, List, Mapping, TypeVar

from exceptions import UnmappedVersionError

logger = logging.getLogger(__name__)

V = TypeVar("V")


class VariantTable(Generic[V]):
    """Maps concrete API versions to the variant that serves them.

    Lookups are exhaustive: a version without an entry is a configuration
    error, never a silent fallback to a neighbouring variant.
    """

    def __init__(self, name: str, variants: Mapping[str, V]):
        self.name = name
        self._variants: Dict[str, V] = dict(variants)

    def __contains__(self, version: str) -> bool:
        return version in self._variants

    def versions(self) -> List[str]:
        return list(self._variants)

    def values(self) -> List[V]:
        return list(self._variants.values())

    def for_version(self, version: str) -> V:
        try:
            return self._variants[version]
        except KeyError:
            raise UnmappedVersionError(self.name, version) from None

    def validate(self, versions: Iterable[str]) -> None:
        """Raise if any of the given versions has no variant."""
        missing = []
        for version in versions:
            if version not in self._variants and version not in missing:
                missing.append(version)

        if missing:
            raise UnmappedVersionError(self.name, missing[0], missing=missing)

        logger.debug(f"Variant table '{self.name}' covers versions: {', '.join(self._variants)}")
