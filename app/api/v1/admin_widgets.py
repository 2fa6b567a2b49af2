"""Admin widget editor: the only writer of widget configuration and causes."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.api.v1.security import _authorize, ensure_can_manage
from app.api.v1.widget_schemas import (
    CauseCreateRequest,
    CauseUpdateRequest,
    CauseView,
    WidgetConfigUpdateRequest,
    WidgetCreateRequest,
    WidgetSummaryView,
    WidgetUpdateRequest,
)
from app.db.session import get_db
from app.models.widget import Widget
from app.security.auth.jwt_handler import Principal
from app.services.widgets.resolver import cause_view, resolve_preview
from app.services.widgets.store import WidgetConfigStore
from app.utils.error_handler import WidgetNotFoundError
from app.utils.logger import add_widget_context, get_logger

router = APIRouter(prefix="/admin/widgets", tags=["admin-widgets"])
logger = get_logger(__name__)


def _managed_widget(store: WidgetConfigStore, slug: str, principal: Principal) -> Widget:
    widget = store.get_widget_by_slug(slug)
    if widget is None:
        raise WidgetNotFoundError(slug)
    ensure_can_manage(principal, widget.organization_id)
    return widget


def _summary(db: Session, widget: Widget) -> WidgetSummaryView:
    resolved = resolve_preview(db, widget.slug)
    return WidgetSummaryView(
        id=widget.id,
        organization_id=widget.organization_id,
        name=widget.name,
        slug=widget.slug,
        is_active=widget.is_active,
        config=resolved.config,
    )


@router.post(
    "",
    response_model=WidgetSummaryView,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
)
def create_widget(
    request: WidgetCreateRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(_authorize),
) -> WidgetSummaryView:
    ensure_can_manage(principal, request.organization_id)
    widget = WidgetConfigStore(db).create_widget(
        request.organization_id, request.name, request.slug, is_active=request.is_active
    )
    logger.info(
        "Widget created by admin",
        subject=principal.subject,
        **add_widget_context(slug=widget.slug, organization_id=widget.organization_id),
    )
    return _summary(db, widget)


@router.get("/{slug}", response_model=WidgetSummaryView, response_model_by_alias=True)
def get_widget(
    slug: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(_authorize),
) -> WidgetSummaryView:
    widget = _managed_widget(WidgetConfigStore(db), slug, principal)
    return _summary(db, widget)


@router.patch("/{slug}", response_model=WidgetSummaryView, response_model_by_alias=True)
def update_widget(
    slug: str,
    request: WidgetUpdateRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(_authorize),
) -> WidgetSummaryView:
    store = WidgetConfigStore(db)
    widget = _managed_widget(store, slug, principal)
    widget = store.update_widget(widget, name=request.name, is_active=request.is_active)
    return _summary(db, widget)


@router.put("/{slug}/config", response_model=WidgetSummaryView, response_model_by_alias=True)
def save_widget_config(
    slug: str,
    request: WidgetConfigUpdateRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(_authorize),
) -> WidgetSummaryView:
    """Partial theme/settings update; omitted keys keep their stored value."""
    store = WidgetConfigStore(db)
    widget = _managed_widget(store, slug, principal)
    widget = store.save_config(
        widget,
        theme=request.theme.model_dump(by_alias=True, exclude_none=True)
        if request.theme
        else None,
        settings_update=request.settings.model_dump(by_alias=True, exclude_none=True)
        if request.settings
        else None,
    )
    return _summary(db, widget)


@router.post(
    "/{slug}/causes",
    response_model=CauseView,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
)
def add_cause(
    slug: str,
    request: CauseCreateRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(_authorize),
) -> CauseView:
    store = WidgetConfigStore(db)
    widget = _managed_widget(store, slug, principal)
    cause = store.add_cause(widget, request.name, request.description, request.goal_amount)
    return cause_view(cause)


@router.patch(
    "/{slug}/causes/{cause_id}", response_model=CauseView, response_model_by_alias=True
)
def update_cause(
    slug: str,
    cause_id: str,
    request: CauseUpdateRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(_authorize),
) -> CauseView:
    store = WidgetConfigStore(db)
    widget = _managed_widget(store, slug, principal)
    cause = store.update_cause(widget, cause_id, **request.model_dump(exclude_unset=True))
    return cause_view(cause)


@router.delete("/{slug}/causes/{cause_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_cause(
    slug: str,
    cause_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(_authorize),
) -> Response:
    store = WidgetConfigStore(db)
    widget = _managed_widget(store, slug, principal)
    store.delete_cause(widget, cause_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
