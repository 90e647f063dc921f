"""API Version Configuration Management."""

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from marshmallow import RAISE, Schema, ValidationError, fields

from exceptions import ConfigurationError

logger = logging.getLogger(__name__)

SEMVER_PATTERN = re.compile(r"(\d+)\.(\d+)\.(\d+)", re.ASCII)


# Built-in version configuration.
# - stable: version served by unversioned paths
# - aliases: static shortcuts such as 'v0'
# - supported: versions that are active and working
# - deprecated: versions scheduled for removal, with sunset dates
# - sunsetted: versions that have been removed
DEFAULT_VERSION_DATA: Dict[str, Any] = {
    "stable": "0.2.0",
    "aliases": {
        "v0": "0.2.0",
    },
    "supported": ["0.1.0", "0.2.0"],
    "deprecated": {
        "0.1.0": {
            "sunset": "2027-02-08T00:00:00Z",
        },
    },
    "sunsetted": [],
}


@dataclass(frozen=True, order=True)
class SemanticVersion:
    """A strict X.Y.Z version, ordered numerically.

    ``full`` keeps the configured spelling ('0.2.07' stays '0.2.07'), so a
    parsed version always maps back to a registry entry.
    """

    major: int
    minor: int
    patch: int
    full: str = field(default="", compare=False)

    @classmethod
    def parse(cls, text: str) -> "SemanticVersion":
        match = SEMVER_PATTERN.fullmatch(text or "")
        if not match:
            raise ValueError(f"Invalid semantic version format: {text!r}. Expected format: X.Y.Z")
        return cls(int(match.group(1)), int(match.group(2)), int(match.group(3)), full=text)

    @classmethod
    def is_valid(cls, text: str) -> bool:
        return bool(SEMVER_PATTERN.fullmatch(text or ""))

    @property
    def minor_key(self) -> str:
        return f"{self.major}.{self.minor}"

    def __str__(self) -> str:
        return self.full or f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True)
class DeprecationInfo:
    """Deprecation information for a version."""

    sunset: datetime


class DeprecatedVersionInfoSchema(Schema):
    """Deprecation entry as written in the version configuration."""

    class Meta:
        unknown = RAISE

    sunset = fields.String(required=True, metadata={"description": "ISO 8601 date-time when this version will be removed"})


class ApiVersionConfigSchema(Schema):
    """Complete API version configuration."""

    class Meta:
        unknown = RAISE

    stable = fields.String(required=True, metadata={"description": "Current stable version (semantic version format)"})
    aliases = fields.Dict(keys=fields.String(), values=fields.String(), load_default=dict)
    supported = fields.List(fields.String(), load_default=list)
    deprecated = fields.Dict(keys=fields.String(), values=fields.Nested(DeprecatedVersionInfoSchema), load_default=dict)
    sunsetted = fields.List(fields.String(), load_default=list)


def parse_sunset(value: Union[str, datetime]) -> datetime:
    """Parse an ISO 8601 date-time, treating naive values as UTC."""
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        # fromisoformat only learned the 'Z' suffix in Python 3.11
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_sunset(value: datetime) -> str:
    """Render a sunset date back to its ISO 8601 'Z' form."""
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class VersionRegistry:
    """Validated, read-only API version configuration.

    Built once at startup and injected into the resolver, the route
    multiplexer and the deprecation middleware.
    """

    stable: str
    aliases: Mapping[str, str] = field(default_factory=dict)
    supported: Tuple[str, ...] = ()
    deprecated: Mapping[str, DeprecationInfo] = field(default_factory=dict)
    sunsetted: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "aliases", MappingProxyType(dict(self.aliases)))
        object.__setattr__(self, "supported", tuple(self.supported))
        object.__setattr__(self, "sunsetted", tuple(self.sunsetted))
        self._validate()

    def _validate(self):
        stable = self.stable
        supported = self.supported
        sunsetted = self.sunsetted
        deprecated_keys = list(self.deprecated.keys())

        if not SemanticVersion.is_valid(stable):
            raise ConfigurationError(
                f"Stable version {stable!r} is not a valid semantic version (expected X.Y.Z)",
                details={"stable": stable},
            )

        if stable in sunsetted:
            raise ConfigurationError(f"Stable version {stable} cannot be in sunsetted list", details={"version": stable})

        if stable in deprecated_keys:
            raise ConfigurationError(f"Stable version {stable} cannot be in deprecated list", details={"version": stable})

        for version in sunsetted:
            if version in supported:
                raise ConfigurationError(
                    f"Version {version} cannot be both sunsetted and supported", details={"version": version}
                )

        for version in sunsetted:
            if version in deprecated_keys:
                raise ConfigurationError(
                    f"Version {version} cannot be both sunsetted and deprecated", details={"version": version}
                )

        seen = set()
        duplicates: List[str] = []
        for version in supported:
            if version in seen:
                duplicates.append(version)
            seen.add(version)
        if duplicates:
            raise ConfigurationError(
                f"Duplicate versions found in supported list: {', '.join(duplicates)}",
                details={"duplicates": duplicates},
            )

        deprecations: Dict[str, DeprecationInfo] = {}
        for version, info in self.deprecated.items():
            raw = info.sunset if isinstance(info, DeprecationInfo) else _sunset_value(info)
            try:
                sunset = parse_sunset(raw)
            except (TypeError, ValueError):
                raise ConfigurationError(
                    f"Sunset date for version {version} is not a valid date-time: {raw!r}",
                    details={"version": version, "sunset": raw},
                ) from None
            deprecations[version] = DeprecationInfo(sunset=sunset)
        object.__setattr__(self, "deprecated", MappingProxyType(deprecations))

        invalid = [v for v in self.known_versions() if not SemanticVersion.is_valid(v)]
        if invalid:
            raise ConfigurationError(
                f"Versions must use the X.Y.Z format: {', '.join(invalid)}", details={"invalid": invalid}
            )

        known = set(self.known_versions())
        for alias, target in self.aliases.items():
            if target not in known:
                raise ConfigurationError(
                    f"Alias {alias} points to unknown version {target}", details={"alias": alias, "target": target}
                )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "VersionRegistry":
        """Load and validate a raw configuration mapping."""
        try:
            loaded = ApiVersionConfigSchema().load(dict(data))
        except ValidationError as e:
            raise ConfigurationError(f"API version configuration is invalid: {e.messages}", details=e.messages) from e

        return cls(
            stable=loaded["stable"],
            aliases=loaded["aliases"],
            supported=loaded["supported"],
            deprecated=loaded["deprecated"],
            sunsetted=loaded["sunsetted"],
        )

    def known_versions(self) -> List[str]:
        """Supported, deprecated and sunsetted versions, deduplicated in that order."""
        known: List[str] = []
        for version in (*self.supported, *self.deprecated.keys(), *self.sunsetted):
            if version not in known:
                known.append(version)
        return known

    def get_deprecation_info(self, version: str) -> Optional[DeprecationInfo]:
        return self.deprecated.get(version)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stable": self.stable,
            "aliases": dict(self.aliases),
            "supported": list(self.supported),
            "deprecated": {v: {"sunset": format_sunset(info.sunset)} for v, info in self.deprecated.items()},
            "sunsetted": list(self.sunsetted),
        }


def _sunset_value(info: Any) -> Any:
    if isinstance(info, Mapping):
        return info.get("sunset")
    return info


def load_version_registry(config_file: Optional[str] = None) -> VersionRegistry:
    """Build the version registry from a JSON file, or the built-in data."""
    if not config_file:
        registry = VersionRegistry.from_dict(DEFAULT_VERSION_DATA)
        logger.info(f"Loaded built-in API version configuration (stable {registry.stable})")
        return registry

    path = Path(config_file)
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read version configuration {path}: {e}", details={"file": str(path)}) from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Version configuration {path} is not valid JSON: {e}", details={"file": str(path)}) from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Version configuration {path} must be a JSON object", details={"file": str(path)})

    registry = VersionRegistry.from_dict(data)
    logger.info(f"Loaded API version configuration from {path} (stable {registry.stable})")
    return registry
