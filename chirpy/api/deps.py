"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast
from uuid import UUID

from flask import Response, current_app, g, jsonify, request

from chirpy.services.auth import AuthService
from chirpy.services.identity import IdentityService

F = TypeVar("F", bound=Callable[..., Any])

AUTH_SERVICE_KEY = "chirpy.auth_service"
IDENTITY_SERVICE_KEY = "chirpy.identity_service"


def get_auth_service() -> AuthService:
    """Return the :class:`AuthService` wired by the application factory."""

    return cast(AuthService, current_app.extensions[AUTH_SERVICE_KEY])


def get_identity_service() -> IdentityService:
    """Return the :class:`IdentityService` wired by the application factory."""

    return cast(IdentityService, current_app.extensions[IDENTITY_SERVICE_KEY])


def authorization_header() -> str | None:
    """Raw ``Authorization`` header of the current request, if any."""

    return request.headers.get("Authorization")


def current_user_id() -> UUID:
    """User id resolved by :func:`require_auth` for the current request."""

    return cast(UUID, g.user_id)


def require_auth(func: F) -> F:
    """Ensure the request carries a valid bearer access token.

    The resolved user id is stored on ``flask.g.user_id``. Authentication
    errors propagate to the error handlers and render as ``401``.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        g.user_id = get_auth_service().authorize(authorization_header())
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
