"""Versioned route mounting and the registry of mounts it produces."""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from flask import Blueprint, Flask

from exceptions import ConfigurationError

from .config import SemanticVersion
from .prefixes import get_version_prefixes
from .resolver import VersionResolver

logger = logging.getLogger(__name__)

RouteSet = Callable[["Mount"], Blueprint]


@dataclass
class Mount:
    """One registration of a route set under one version prefix."""

    base_path: str
    prefix: str
    path: str
    version: str
    hidden: bool
    options: Dict[str, Any] = field(default_factory=dict)
    route_set: Optional[RouteSet] = field(default=None, repr=False, compare=False)
    blueprint_name: Optional[str] = None

    @property
    def canonical(self) -> bool:
        return not self.hidden


class MountRegistry:
    """Central registry for all versioned mounts across route groups."""

    def __init__(self):
        # Store mounts by base path, in registration order
        self._mounts: Dict[str, List[Mount]] = {}

    def register_mount(self, mount: Mount):
        """Record a mount; duplicate paths are ignored with a warning."""
        mounts = self._mounts.setdefault(mount.base_path, [])

        for existing in mounts:
            if existing.path == mount.path:
                logger.warning(f"Duplicate mount registration: {mount.path} ({mount.version})")
                return

        mounts.append(mount)
        logger.debug(f"Registered mount: {mount.path} ({mount.version})")

    def has_mount(self, base_path: str, path: str) -> bool:
        return any(existing.path == path for existing in self._mounts.get(base_path, []))

    def all_mounts(self) -> List[Mount]:
        return [mount for mounts in self._mounts.values() for mount in mounts]

    def get_mounts_by_base_path(self, base_path: str) -> List[Mount]:
        return list(self._mounts.get(base_path, []))

    def get_mounts_by_version(self, version: str) -> List[Mount]:
        return [mount for mount in self.all_mounts() if mount.version == version]

    def get_canonical_mounts(self) -> List[Mount]:
        return [mount for mount in self.all_mounts() if mount.canonical]

    def base_paths(self) -> List[str]:
        return list(self._mounts)

    def generate_mount_report(self) -> Dict[str, Any]:
        """Summarise mounts per base path and per concrete version."""
        report = {
            "total_mounts": 0,
            "by_base_path": {},
            "by_version": {},
        }

        for base_path, mounts in self._mounts.items():
            canonical = [m.path for m in mounts if m.canonical]
            report["by_base_path"][base_path] = {
                "count": len(mounts),
                "canonical": canonical[0] if canonical else None,
                "paths": [m.path for m in mounts],
            }
            report["total_mounts"] += len(mounts)

            for mount in mounts:
                report["by_version"][mount.version] = report["by_version"].get(mount.version, 0) + 1

        return report

    def validate_mounts(self) -> List[str]:
        """Check that every base path has exactly one canonical mount."""
        issues = []

        for base_path, mounts in self._mounts.items():
            canonical = [m for m in mounts if m.canonical]
            if len(canonical) != 1:
                issues.append(f"Base path {base_path} has {len(canonical)} canonical mounts (expected 1)")

        return issues


class VersionedRouter:
    """Mounts a route set under every servable version prefix.

    Runs once during application setup, before the server accepts
    connections.
    """

    def __init__(self, resolver: VersionResolver, mounts: Optional[MountRegistry] = None):
        self.resolver = resolver
        self.mounts = mounts if mounts is not None else MountRegistry()

    def plan(
        self,
        base_path: str,
        version_options: Optional[Mapping[str, Dict[str, Any]]] = None,
        min_version: Optional[str] = None,
    ) -> List[Mount]:
        """Compute the mounts for a base path without touching any app."""
        version_options = version_options or {}
        floor = _parse_floor(min_version)
        canonical_prefix = f"v{self.resolver.stable}"

        planned = []
        for prefix in get_version_prefixes(self.resolver.registry):
            version = self.resolver.resolve(prefix)

            if floor is not None and not _meets_floor(version, floor):
                logger.debug(f"Skipping {base_path} at prefix '{prefix}': {version} is below {min_version}")
                continue

            planned.append(
                Mount(
                    base_path=base_path,
                    prefix=prefix,
                    path=f"/{prefix}{base_path}" if prefix else base_path,
                    version=version,
                    hidden=prefix != canonical_prefix,
                    options=dict(version_options.get(version, {})),
                )
            )

        if not any(mount.canonical for mount in planned):
            message = f"Base path {base_path} has no canonical mount at /{canonical_prefix}{base_path}"
            if floor is not None and not _meets_floor(self.resolver.stable, floor):
                message += f": minimum version {min_version} is above stable {self.resolver.stable}"
            raise ConfigurationError(
                message,
                details={"base_path": base_path, "stable": self.resolver.stable, "min_version": min_version},
            )

        return planned

    def register(
        self,
        app: Flask,
        base_path: str,
        route_set: RouteSet,
        version_options: Optional[Mapping[str, Dict[str, Any]]] = None,
        min_version: Optional[str] = None,
    ) -> List[Mount]:
        """Register a route set at every version prefix of a base path.

        Exactly one mount (the exact stable prefix) is canonical; the
        rest are hidden from documentation but serve identically.

        Mounts of sunsetted versions are recorded without a blueprint: the
        deprecation enforcer answers them with 410 before routing, so the
        route set needs no variant for them. Returns the mounts recorded
        by this call; paths already registered are skipped.
        """
        planned = self.plan(base_path, version_options=version_options, min_version=min_version)

        variants = getattr(route_set, "variants", None)
        if variants is not None:
            variants.validate(mount.version for mount in planned if self.resolver.is_servable(mount.version))

        registered = []
        for index, mount in enumerate(planned):
            if self.mounts.has_mount(base_path, mount.path):
                logger.warning(f"Duplicate mount registration: {mount.path} ({mount.version})")
                continue

            mount.route_set = route_set
            if self.resolver.is_servable(mount.version) or variants is None or mount.version in variants:
                blueprint = route_set(mount)
                mount.blueprint_name = _blueprint_name(blueprint.name, base_path, index, mount.prefix)
                app.register_blueprint(blueprint, url_prefix=mount.path, name=mount.blueprint_name)

            self.mounts.register_mount(mount)
            registered.append(mount)

            docs_status = "(documented)" if mount.canonical else "(hidden)"
            logger.info(f"Registered {base_path} at: {mount.path} -> {mount.version} {docs_status}")

        return registered


def register_versioned_routes(
    app: Flask,
    resolver: VersionResolver,
    base_path: str,
    route_set: RouteSet,
    version_options: Optional[Mapping[str, Dict[str, Any]]] = None,
    min_version: Optional[str] = None,
    mounts: Optional[MountRegistry] = None,
) -> List[Mount]:
    """Convenience function to mount a route set with a one-off router."""
    router = VersionedRouter(resolver, mounts=mounts)
    return router.register(app, base_path, route_set, version_options=version_options, min_version=min_version)


def _parse_floor(min_version: Optional[str]) -> Optional[SemanticVersion]:
    if not min_version:
        return None
    try:
        return SemanticVersion.parse(min_version)
    except ValueError as e:
        raise ConfigurationError(f"Invalid minimum version {min_version!r}: {e}", details={"min_version": min_version}) from e


def _meets_floor(version: str, floor: SemanticVersion) -> bool:
    # Unparseable versions cannot be ordered, so they never clear a floor
    if not SemanticVersion.is_valid(version):
        return False
    return SemanticVersion.parse(version) >= floor


def _blueprint_name(name: str, base_path: str, index: int, prefix: str) -> str:
    # Flask rejects dots in blueprint names and needs one name per registration
    return "_".join((name, _slug(base_path, "root"), str(index), _slug(prefix, "default")))


def _slug(text: str, empty: str) -> str:
    return re.sub(r"[^0-9A-Za-z]+", "_", text).strip("_") or empty
