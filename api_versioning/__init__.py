"""API Versioning System for the Symb0l API.

This module provides centralized API versioning management including:
- Validated version configuration (stable, aliases, lifecycle sets)
- Resolution of exact, minor-alias, static-alias and default version tokens
- Mounting of route sets under every version prefix
- Middleware enforcing deprecation headers and sunset responses
"""

from exceptions import ConfigurationError, UnmappedVersionError

from .config import (
    DEFAULT_VERSION_DATA,
    DeprecationInfo,
    SemanticVersion,
    VersionRegistry,
    load_version_registry,
)
from .middleware import DeprecationEnforcer, add_deprecation_enforcer
from .prefixes import get_version_prefixes
from .registry import Mount, MountRegistry, VersionedRouter, register_versioned_routes
from .resolver import VersionResolver, VersionStatus
from .variants import VariantTable

__all__ = [
    "ConfigurationError",
    "UnmappedVersionError",
    "DEFAULT_VERSION_DATA",
    "DeprecationInfo",
    "SemanticVersion",
    "VersionRegistry",
    "load_version_registry",
    "VersionResolver",
    "VersionStatus",
    "get_version_prefixes",
    "Mount",
    "MountRegistry",
    "VersionedRouter",
    "register_versioned_routes",
    "DeprecationEnforcer",
    "add_deprecation_enforcer",
    "VariantTable",
]

__version__ = "1.0.0"
