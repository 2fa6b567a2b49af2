from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Header, HTTPException, status

from app.core.config import settings
from app.security.auth.jwt_handler import InvalidTokenError, Principal, get_jwt_handler
from app.utils.logger import get_logger

router = APIRouter(tags=["security"], prefix="/secure")
logger = get_logger(__name__)


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    if not authorization.lower().startswith("bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid authorization header",
        )
    return authorization.split(" ", 1)[1].strip()


def _authorize(
    authorization: str | None = Header(default=None),
    session_token: str | None = Cookie(default=None, alias=settings.SESSION_COOKIE_NAME),
) -> Principal:
    """Resolve the caller from a bearer token, falling back to the session cookie."""
    token = _bearer_token(authorization) or session_token
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid authorization header",
        )
    try:
        return get_jwt_handler().principal_from_token(token)
    except InvalidTokenError as exc:
        logger.info("Rejected admin token", reason=str(exc))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token"
        ) from exc


def ensure_can_manage(principal: Principal, organization_id: Optional[str]) -> None:
    """403 unless the caller is a super admin or belongs to the organization."""
    if not principal.can_manage(organization_id):
        logger.warning(
            "Organization access denied",
            subject=principal.subject,
            role=principal.role.value,
            organization_id=organization_id,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to manage this organization",
        )


@router.get("/whoami")
def whoami(principal: Principal = Depends(_authorize)) -> dict:
    return {
        "status": "ok",
        "user": principal.subject,
        "role": principal.role.value,
        "organizationId": principal.organization_id,
    }
