# chirpy/services/_shared/base.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from http import HTTPStatus
from uuid import UUID

from chirpy.core import errors as api_errors
from chirpy.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    ForbiddenOperationError,
    HashingError,
    NotFoundError,
    ServiceError,
    StorageError,
    UnauthorizedError,
)
from chirpy.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data.

    :param actor_id: Authenticated user identifier.
    :param request_id: Correlation id for logging/tracing.
    """

    actor_id: UUID | None = None
    request_id: str | None = None


def translate_service_error(exc: Exception) -> Exception:
    """
    Map a service-level error onto an HTTP-level :class:`APIError`.

    :param exc: Exception raised within the service layer.
    :returns: Translated exception, or ``exc`` untouched when it is not a
        :class:`ServiceError`.
    """
    if isinstance(exc, AuthenticationError):
        # → 401, each subclass carries its own stable code
        if isinstance(exc, UnauthorizedError) and exc.reason:
            log.info("auth.rejected reason=%s", exc.reason)
        return api_errors.Unauthorized(str(exc), code=exc.code)

    if isinstance(exc, ForbiddenOperationError):
        return api_errors.Forbidden(str(exc))

    if isinstance(exc, NotFoundError):
        return api_errors.NotFound(str(exc))

    if isinstance(exc, ConflictError):
        return api_errors.Conflict(str(exc))

    if isinstance(exc, StorageError):
        # → 503, the store may recover without client changes
        return api_errors.APIError(
            message=str(exc),
            status_code=HTTPStatus.SERVICE_UNAVAILABLE,
            code=exc.code,
        )

    if isinstance(exc, HashingError):
        return api_errors.APIError(
            message="Unexpected error",
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            code=exc.code,
        )

    # Any other ServiceError subclass → 400 Bad Request
    if isinstance(exc, ServiceError):
        return api_errors.APIError(message=str(exc), status_code=400, code=exc.code)

    return exc


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Centralize error translation.
    * Keep services thin, orchestration-only, no web/ORM leakage.
    """

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        """
        Initialize the base service.

        :param ctx: Optional request-scoped context.
        :type ctx: ServiceContext | None
        """
        self.ctx = ctx or ServiceContext()

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(self) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork()

    # -------------------------- Error handling ------------------------------

    def translate_exceptions(self, exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        return translate_service_error(exc)
