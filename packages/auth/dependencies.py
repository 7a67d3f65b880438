from typing import Annotated, Optional
from fastapi import HTTPException, status, Header

from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.auth.models.domain.authenticated_user import AuthenticatedUser

logger = get_logger(__name__)


@trace_span
async def get_current_user(
    x_user_id: Annotated[Optional[str], Header()] = None,
) -> AuthenticatedUser:
    """
    Caller identity handed over by the upstream gateway in ``X-User-Id``.

    Authentication happens before requests reach this service; only the
    presence and shape of the id is checked here. Account status and roles
    are checked by the services that need them.
    """
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-Id header missing",
        )

    try:
        user_id = int(x_user_id)
    except ValueError:
        user_id = 0

    if user_id <= 0:
        logger.warning(f"Rejected malformed X-User-Id header: {x_user_id!r}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-Id header invalid",
        )

    return AuthenticatedUser(user_id=user_id)
