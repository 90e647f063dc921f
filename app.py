"""Flask application factory for the Symb0l API."""

import argparse
import logging
import sys
import time
from typing import Optional

from flask import Flask, g, jsonify, redirect, request
from werkzeug.exceptions import HTTPException

from api import register_all_apis
from api_versioning import (
    DeprecationEnforcer,
    VersionedRouter,
    VersionRegistry,
    VersionResolver,
    get_version_prefixes,
    load_version_registry,
)
from config import AppConfig, load_config, validate_config
from exceptions import ConfigurationError
from log_utils import get_request_id, log_request_end, setup_logging
from openapi_spec import generate_openapi_json

logger = logging.getLogger(__name__)


def create_app(config: Optional[AppConfig] = None,
               version_registry: Optional[VersionRegistry] = None) -> Flask:
    """Build the app; raises ConfigurationError before any route is served."""
    config = config or load_config()
    registry = version_registry or load_version_registry(config.versions_file)
    resolver = VersionResolver(registry)

    app = Flask(__name__)
    app.config["SERVICE_NAME"] = config.service_name

    register_request_logging(app)

    # Sunsetted versions must be answered before any view runs
    enforcer = DeprecationEnforcer(resolver, app)
    register_error_handlers(app)

    router = VersionedRouter(resolver)
    route_sets = register_all_apis(app, router, service_name=config.service_name)

    issues = router.mounts.validate_mounts()
    if issues:
        raise ConfigurationError(f"Invalid route mounts: {'; '.join(issues)}", details={"issues": issues})

    app.extensions["api_versioning"] = {
        "registry": registry,
        "resolver": resolver,
        "router": router,
        "enforcer": enforcer,
        "route_sets": route_sets,
    }

    @app.route("/")
    def index():
        return redirect("/health")

    @app.route("/versions")
    def api_versions_info():
        """Endpoint to get API version information."""
        return jsonify({
            **registry.to_dict(),
            "prefixes": get_version_prefixes(registry),
            "mounts": router.mounts.generate_mount_report(),
        })

    @app.route("/openapi.json")
    def openapi_json():
        return jsonify(generate_openapi_json(router.mounts, registry, route_sets, title=config.service_name))

    logger.info(
        f"API version configuration loaded: stable {registry.stable}, "
        f"aliases {dict(registry.aliases)}, prefixes {get_version_prefixes(registry)}"
    )
    return app


def register_request_logging(app: Flask) -> None:
    @app.before_request
    def start_timer():
        g.request_start = time.perf_counter()
        get_request_id()

    @app.after_request
    def log_request(response):
        start = g.get("request_start")
        if start is not None:
            log_request_end(
                request.method,
                request.path,
                response.status_code,
                time.perf_counter() - start,
                custom_api_version=g.get("api_version"),
            )
        return response


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        """Render HTTP errors with the same body shape as 410 Gone."""
        response = jsonify({
            "statusCode": error.code,
            "error": error.name,
            "message": error.description,
        })
        response.status_code = error.code
        return response


def main() -> None:
    parser = argparse.ArgumentParser(description="Symb0l API server")
    parser.add_argument("--config", help="JSON application config file")
    parser.add_argument("--versions", help="JSON API version config file")
    parser.add_argument("--host", help="Bind address")
    parser.add_argument("--port", type=int, help="Bind port")
    parser.add_argument("--debug", action="store_true", help="Enable Flask debug mode")
    args = parser.parse_args()

    config = load_config(args.config)
    if args.versions:
        config.versions_file = args.versions
    if args.host:
        config.server.host = args.host
    if args.port:
        config.server.port = args.port
    if args.debug:
        config.server.debug = True

    setup_logging(
        level=getattr(logging, config.logging.level.upper(), logging.INFO),
        use_json=config.logging.format == "json",
        log_file=config.logging.file,
        max_file_size=config.logging.max_file_size,
        backup_count=config.logging.backup_count,
    )

    errors = validate_config(config)
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        sys.exit(1)

    try:
        app = create_app(config)
    except ConfigurationError as e:
        logger.error(f"Refusing to start: {e.message}", extra={"custom_details": e.details})
        sys.exit(1)

    app.run(host=config.server.host, port=config.server.port, debug=config.server.debug)


if __name__ == "__main__":
    main()
