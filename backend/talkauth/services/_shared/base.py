# talkauth/services/_shared/base.py
from __future__ import annotations

from dataclasses import dataclass

from talkauth.services._shared.errors import ServiceError
from talkauth.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data.

    :param subject_id: Authenticated account id, when the call is authenticated.
    :param request_id: Correlation id for logging/tracing.
    """

    subject_id: str | None = None
    request_id: str | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Centralize error translation.
    * Keep services thin and orchestration-only, with no web or ORM leakage.

    Notes
    -----
    - Services never touch the global session; always use a Unit of Work.
    - Services hold no locks and no per-call state; all state lives in the
      credential store and the session store.
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
        Map service-level errors to API-level (HTTP) errors.

        Each :class:`ServiceError` already knows its status and code, so the
        translation keeps both. Anything else is returned untouched and bubbles
        up to the Flask handlers.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        from talkauth.core import errors as api_errors

        if isinstance(exc, ServiceError):
            return api_errors.APIError.from_service_error(exc)
        return exc
