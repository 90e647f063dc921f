"""API module for the Symb0l API - versioned route groups."""

from typing import Dict

from flask import Flask

from api_versioning import VersionedRouter

from .health import HealthRoutes


def register_all_apis(app: Flask, router: VersionedRouter, service_name: str = "Symb0l API") -> Dict[str, object]:
    """Mount every route group under all of its version prefixes.

    Returns the route sets keyed by base path, for documentation.
    """
    registry = router.resolver.registry

    route_sets = {
        "/health": HealthRoutes(registry, service_name=service_name),
    }

    for base_path, route_set in route_sets.items():
        router.register(app, base_path, route_set)

    report = router.mounts.generate_mount_report()
    app.logger.info(f"Total mounts registered: {report['total_mounts']}")
    for base_path, stats in report["by_base_path"].items():
        app.logger.info(f"  {base_path}: {stats['count']} mounts, canonical {stats['canonical']}")

    return route_sets


__all__ = ["register_all_apis"]
