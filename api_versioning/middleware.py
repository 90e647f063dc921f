"""Deprecation and sunset enforcement for versioned requests."""

import logging
import re
from typing import Optional, Tuple

from flask import Flask, Response, g, jsonify, request
from werkzeug.http import http_date

from .resolver import VersionResolver, VersionStatus

logger = logging.getLogger(__name__)

VERSION_SEGMENT = re.compile(r"v?([\d.]+)", re.ASCII)


class DeprecationEnforcer:
    """Middleware that rejects sunsetted versions and flags deprecated ones.

    The before_request hook classifies the version named by the first path
    segment and answers 410 Gone for sunsetted versions, so the matched view
    never runs. The after_request hook adds the resolved and stable version
    headers, plus Deprecation, Sunset and Link for deprecated versions.
    """

    def __init__(self, resolver: VersionResolver, app: Flask = None):
        self.resolver = resolver
        self.app = app

        if app:
            self.init_app(app)

    def init_app(self, app: Flask):
        """Initialize the middleware with a Flask app."""
        self.app = app

        app.before_request(self.handle_version_lifecycle)
        app.after_request(self.add_version_headers)

        app.extensions["deprecation_enforcer"] = self
        logger.info("Deprecation enforcer initialized")

    def extract_version_token(self, path: str) -> Tuple[str, str]:
        """Split a path into its version token and the remaining path.

        '/v0.1.0/health' -> ('0.1.0', '/health'); '/health' -> ('', '/health').
        """
        segment, _, rest = path.lstrip("/").partition("/")
        remainder = f"/{rest}" if rest else ""

        if segment and segment in self.resolver.registry.aliases:
            return segment, remainder

        match = VERSION_SEGMENT.fullmatch(segment)
        if match:
            return match.group(1), remainder

        return "", path

    def handle_version_lifecycle(self) -> Optional[Response]:
        token, remainder = self.extract_version_token(request.path)
        version = self.resolver.resolve(token)
        status = self.resolver.get_status(version)

        g.api_version = version
        g.api_version_status = status
        g.api_path_remainder = remainder

        if status is VersionStatus.SUNSETTED:
            stable = self.resolver.stable
            logger.warning(f"Request to sunsetted API version {version}: {request.method} {request.path}")
            response = jsonify(
                {
                    "statusCode": 410,
                    "error": "Gone",
                    "message": (
                        f"API version {version} has been sunset and is no longer available. "
                        f"Please upgrade to version {stable}."
                    ),
                    "stableVersion": stable,
                }
            )
            response.status_code = 410
            return response

        if status is VersionStatus.DEPRECATED:
            logger.info(f"Request to deprecated API version {version}: {request.method} {request.path}")

        return None

    def add_version_headers(self, response: Response) -> Response:
        """Add version-related headers to the response."""
        status = g.get("api_version_status")
        if status is None or status is VersionStatus.SUNSETTED:
            return response

        version = g.api_version
        stable = self.resolver.stable

        response.headers["X-Resolved-Version"] = version
        response.headers["X-API-Stable-Version"] = stable

        if status is VersionStatus.DEPRECATED:
            info = self.resolver.registry.get_deprecation_info(version)
            if info:
                sunset = http_date(info.sunset)
                response.headers["Deprecation"] = sunset
                response.headers["Sunset"] = sunset
                response.headers["Link"] = f'<{self._successor_url(stable)}>; rel="successor-version"'

        return response

    def _successor_url(self, stable: str) -> str:
        url = f"/v{stable}{g.get('api_path_remainder', '')}"
        if request.query_string:
            url += "?" + request.query_string.decode("latin-1")
        return url


def add_deprecation_enforcer(app: Flask, resolver: VersionResolver) -> DeprecationEnforcer:
    """Convenience function to add the deprecation enforcer to a Flask app."""
    return DeprecationEnforcer(resolver, app)
