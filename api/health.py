"""Health check route set with version-specific response shapes."""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, NamedTuple, Type

from flask import Blueprint, jsonify
from marshmallow import Schema, fields

from api_versioning import Mount, VariantTable, VersionRegistry
from api_versioning.config import format_sunset

logger = logging.getLogger(__name__)


# ===== SCHEMAS =====

class SunsetSchema(Schema):
    """Sunset date of a deprecated version."""
    sunset = fields.String(metadata={"description": "ISO 8601 removal date"})


class HealthV1Schema(Schema):
    """Health check response for API 0.1.0."""
    status = fields.String(required=True)
    service = fields.String(required=True)
    version = fields.String(required=True)
    stableVersion = fields.String(required=True)
    supportedVersions = fields.List(fields.String(), required=True)
    deprecatedVersions = fields.Dict(keys=fields.String(), values=fields.Nested(SunsetSchema), required=True)
    timestamp = fields.String(required=True)


class HealthApiSchema(Schema):
    """Service identity block."""
    name = fields.String(required=True)
    version = fields.String(required=True)


class HealthVersionsSchema(Schema):
    """Version lifecycle summary."""
    stable = fields.String(required=True)
    supported = fields.List(fields.String(), required=True)
    deprecated = fields.List(fields.String(), required=True)
    sunsetted = fields.List(fields.String(), required=True)


class HealthV2Schema(Schema):
    """Health check response for API 0.2.0."""
    status = fields.String(required=True)
    api = fields.Nested(HealthApiSchema, required=True)
    versions = fields.Nested(HealthVersionsSchema, required=True)
    timestamp = fields.String(required=True)
    uptime = fields.Float(required=True, metadata={"description": "Seconds since the route set was created"})


class HealthVariant(NamedTuple):
    component: str
    schema: Type[Schema]
    build: Callable[[], Dict[str, Any]]


# ===== ROUTES =====

class HealthRoutes:
    """Route set serving GET on its mount path.

    The response shape is chosen by the concrete version of the mount,
    so '/v0.2.0/health', '/v0/health' and '/health' answer identically.
    """

    def __init__(self, registry: VersionRegistry, service_name: str = "Symb0l API"):
        self.registry = registry
        self.service_name = service_name
        self.started_at = time.monotonic()
        self.variants: VariantTable[HealthVariant] = VariantTable(
            "health",
            {
                "0.1.0": HealthVariant("HealthV1", HealthV1Schema, self.build_v1),
                "0.2.0": HealthVariant("HealthV2", HealthV2Schema, self.build_v2),
            },
        )

    def __call__(self, mount: Mount) -> Blueprint:
        variant = self.variants.for_version(mount.version)
        health_bp = Blueprint("health", __name__)

        @health_bp.route("", methods=["GET"])
        def health_check():
            return jsonify(variant.schema().dump(variant.build())), 200

        return health_bp

    def build_v1(self) -> Dict[str, Any]:
        registry = self.registry
        return {
            "status": "ok",
            "service": self.service_name,
            "version": registry.stable,
            "stableVersion": registry.stable,
            "supportedVersions": list(registry.supported),
            "deprecatedVersions": {v: {"sunset": format_sunset(info.sunset)} for v, info in registry.deprecated.items()},
            "timestamp": _now(),
        }

    def build_v2(self) -> Dict[str, Any]:
        registry = self.registry
        return {
            "status": "healthy",
            "api": {"name": self.service_name, "version": registry.stable},
            "versions": {
                "stable": registry.stable,
                "supported": list(registry.supported),
                "deprecated": list(registry.deprecated),
                "sunsetted": list(registry.sunsetted),
            },
            "timestamp": _now(),
            "uptime": round(time.monotonic() - self.started_at, 3),
        }

    def schemas(self) -> Dict[str, Type[Schema]]:
        return {variant.component: variant.schema for variant in self.variants.values()}

    def describe(self, mount: Mount) -> Dict[str, Dict[str, Any]]:
        """OpenAPI operations keyed by path suffix under the mount."""
        variant = self.variants.for_version(mount.version)
        return {
            "": {
                "get": {
                    "tags": ["Health"],
                    "summary": "Health check",
                    "description": f"Service status and API version lifecycle ({mount.version} response format)",
                    "responses": {
                        "200": {
                            "description": "Service is healthy",
                            "content": {
                                "application/json": {
                                    "schema": {"$ref": f"#/components/schemas/{variant.component}"}
                                }
                            },
                        }
                    },
                }
            }
        }


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
