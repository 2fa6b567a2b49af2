"""Cross-origin widget configuration endpoint used by embeds on host pages."""

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.security.validation.public_cors import OPEN_CORS_HEADERS
from app.services.widgets.resolver import resolve_for_organization
from app.utils.error_handler import OrganizationNotFoundError, error_handler
from app.utils.logger import add_widget_context, get_logger

router = APIRouter(prefix="/widget-config", tags=["widget-config"])
logger = get_logger(__name__)


@router.get("/{organization_id}")
def get_widget_config(organization_id: str, db: Session = Depends(get_db)):
    """Resolved configuration of an organization's widget."""
    try:
        resolved = resolve_for_organization(db, organization_id)
    except OrganizationNotFoundError as exc:
        error_handler.handle_error(exc, add_widget_context(organization_id=organization_id))
        return JSONResponse(
            status_code=404,
            content={"error": "Organization not found"},
            headers=OPEN_CORS_HEADERS,
        )

    logger.debug(
        "Widget config served",
        configured=resolved.configured,
        causes=len(resolved.config.causes),
        **add_widget_context(slug=resolved.slug, organization_id=organization_id),
    )
    return JSONResponse(
        content=resolved.model_dump(mode="json", by_alias=True),
        headers=OPEN_CORS_HEADERS,
    )


@router.options("/{organization_id}")
def widget_config_preflight(organization_id: str) -> Response:
    return Response(status_code=200, headers=OPEN_CORS_HEADERS)
