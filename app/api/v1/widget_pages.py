"""Hosted widget pages: the public donation page and the admin preview."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse
from sqlalchemy.orm import Session

from app.api.v1.security import _authorize, ensure_can_manage
from app.api.v1.widget_schemas import DonationSubmission, ResolvedWidgetConfig
from app.db.session import get_db
from app.security.auth.jwt_handler import Principal
from app.services.embed.messages import MESSAGE_TYPE, close_message
from app.services.widgets.donation_form import DonationForm, submit_donation
from app.services.widgets.resolver import resolve_preview, resolve_public
from app.utils.error_handler import NotFoundError, error_handler
from app.utils.logger import add_widget_context, get_logger
from app.web.templating import render_page

router = APIRouter(tags=["widget-pages"])
logger = get_logger(__name__)


def _not_found_page(exc: NotFoundError, slug: str) -> HTMLResponse:
    error_handler.handle_error(exc, add_widget_context(slug=slug))
    return render_page("widget_not_found.html", status_code=404)


def _widget_page(
    resolved: ResolvedWidgetConfig, donate_url: str, *, preview: bool
) -> HTMLResponse:
    form = DonationForm(preview=preview)
    form.load(resolved)
    payload = {
        "widget": resolved.model_dump(mode="json", by_alias=True),
        "preview": preview,
        "limits": form.limits,
        "donateUrl": donate_url,
        "messageType": MESSAGE_TYPE,
        "closeMessage": close_message(),
    }
    return render_page(
        "widget_page.html",
        widget=resolved,
        payload=payload,
        preview=preview,
        donate_url=donate_url,
    )


def _donation_response(
    resolved: ResolvedWidgetConfig, submission: DonationSubmission, *, preview: bool
) -> JSONResponse:
    result = submit_donation(resolved, submission, preview=preview)
    logger.info(
        "Donation submission checked",
        ok=result.ok,
        preview=preview,
        issues=[issue.field for issue in result.issues],
        **add_widget_context(slug=resolved.slug, organization_id=resolved.organization_id),
    )
    return JSONResponse(
        status_code=200 if result.ok else 422,
        content=result.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


def _preview_config(db: Session, slug: str, principal: Principal) -> ResolvedWidgetConfig:
    resolved = resolve_preview(db, slug)
    ensure_can_manage(principal, resolved.organization_id)
    return resolved


# === Public ===


@router.get("/widget/{slug}", response_class=HTMLResponse)
def widget_page(slug: str, db: Session = Depends(get_db)):
    try:
        resolved = resolve_public(db, slug)
    except NotFoundError as exc:
        return _not_found_page(exc, slug)
    return _widget_page(resolved, f"/widget/{slug}/donate", preview=False)


@router.post("/widget/{slug}/donate")
def donate(slug: str, submission: DonationSubmission, db: Session = Depends(get_db)):
    resolved = resolve_public(db, slug)
    return _donation_response(resolved, submission, preview=False)


# === Admin preview ===


@router.get("/admin/widgets/preview/{slug}", response_class=HTMLResponse)
def preview_page(
    slug: str,
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(_authorize),
):
    try:
        resolved = _preview_config(db, slug, principal)
    except NotFoundError as exc:
        return _not_found_page(exc, slug)
    logger.info(
        "Admin preview opened",
        subject=principal.subject,
        path=request.url.path,
        **add_widget_context(slug=slug, organization_id=resolved.organization_id),
    )
    return _widget_page(resolved, f"/admin/widgets/preview/{slug}/donate", preview=True)


@router.post("/admin/widgets/preview/{slug}/donate")
def preview_donate(
    slug: str,
    submission: DonationSubmission,
    db: Session = Depends(get_db),
    principal: Principal = Depends(_authorize),
):
    resolved = _preview_config(db, slug, principal)
    return _donation_response(resolved, submission, preview=True)
