"""
Widget configuration resolution.

Turns stored organization, widget and cause rows into the
``ResolvedWidgetConfig`` payload consumed by embeds and widget pages. Three
entry points share one assembly path:

- ``resolve_for_organization``: keyed by organization id, used by the
  cross-origin config endpoint. Falls back to a synthetic default widget
  while onboarding is incomplete.
- ``resolve_public``: keyed by slug, only active widgets and active causes.
- ``resolve_preview``: keyed by slug, no activity filtering. Admin only.

Only a missing organization (or, on the slug paths, a missing/inactive
widget) is an error. A causes table that cannot be read degrades to an
empty list so host pages keep rendering.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.v1.widget_schemas import CauseView, ResolvedWidgetConfig, WidgetConfigView
from app.core.config import settings
from app.models.organization import Organization
from app.models.widget import Cause, Widget
from app.services.widget_metrics import get_widget_metrics
from app.services.widgets.defaults import (
    DEFAULT_WIDGET_ID,
    DEFAULT_WIDGET_NAME,
    DEFAULT_WIDGET_SLUG,
    resolve_settings,
    resolve_theme,
)
from app.services.widgets.store import WidgetConfigStore
from app.utils.error_handler import OrganizationNotFoundError, WidgetNotFoundError
from app.utils.logger import add_widget_context, get_logger

__all__ = ["resolve_for_organization", "resolve_public", "resolve_preview", "cause_view"]

logger = get_logger(__name__)
metrics = get_widget_metrics()


def resolve_for_organization(db: Session, organization_id: str) -> ResolvedWidgetConfig:
    """Resolve the widget config of an organization's (first) widget."""
    store = WidgetConfigStore(db)
    with metrics.time_resolution("organization"):
        organization = store.get_organization(organization_id)
        if organization is None:
            metrics.increment_resolution("organization", "not_found")
            raise OrganizationNotFoundError(organization_id)

        widget = store.get_widget_for_organization(organization_id)
        if widget is None:
            logger.warning(
                "No widget configured for organization, serving defaults",
                **add_widget_context(organization_id=organization_id),
            )
            metrics.increment_degraded_dependency("widget")
            causes: List[Cause] = []
        else:
            causes = _load_causes(store, widget, active_only=True)

        metrics.increment_resolution("organization", "ok")
        return _assemble(organization, widget, causes)


def resolve_public(db: Session, slug: str) -> ResolvedWidgetConfig:
    """Resolve an active widget by slug for the public page."""
    store = WidgetConfigStore(db)
    with metrics.time_resolution("public"):
        widget = store.get_widget_by_slug(slug)
        if widget is None or not widget.is_active:
            reason = "missing" if widget is None else "inactive"
            metrics.increment_resolution("public", "not_found")
            raise WidgetNotFoundError(slug, reason=reason)

        organization = _owning_organization(store, widget, "public")
        causes = _load_causes(store, widget, active_only=True)
        metrics.increment_resolution("public", "ok")
        return _assemble(organization, widget, causes)


def resolve_preview(db: Session, slug: str) -> ResolvedWidgetConfig:
    """Resolve a widget by slug for admin preview, active or not."""
    store = WidgetConfigStore(db)
    with metrics.time_resolution("preview"):
        widget = store.get_widget_by_slug(slug)
        if widget is None:
            metrics.increment_resolution("preview", "not_found")
            raise WidgetNotFoundError(slug)

        organization = _owning_organization(store, widget, "preview")
        causes = _load_causes(store, widget, active_only=False)
        metrics.increment_resolution("preview", "ok")
        return _assemble(organization, widget, causes)


def _owning_organization(
    store: WidgetConfigStore, widget: Widget, variant: str
) -> Organization:
    organization = store.get_organization(widget.organization_id)
    if organization is None:
        metrics.increment_resolution(variant, "not_found")
        raise OrganizationNotFoundError(widget.organization_id)
    return organization


def _load_causes(
    store: WidgetConfigStore, widget: Widget, *, active_only: bool
) -> List[Cause]:
    try:
        return store.list_causes(widget.id, active_only=active_only)
    except SQLAlchemyError as exc:
        # e.g. the causes table has not been provisioned yet
        store.rollback()
        logger.warning(
            "Cause storage unavailable, resolving with no causes",
            error_type=type(exc).__name__,
            **add_widget_context(slug=widget.slug),
        )
        metrics.increment_degraded_dependency("causes")
        return []


def _assemble(
    organization: Organization,
    widget: Optional[Widget],
    causes: List[Cause],
) -> ResolvedWidgetConfig:
    stored = (widget.config if widget is not None else None) or {}
    if not isinstance(stored, dict):
        stored = {}

    return ResolvedWidgetConfig(
        id=widget.id if widget is not None else DEFAULT_WIDGET_ID,
        name=widget.name if widget is not None else DEFAULT_WIDGET_NAME,
        slug=widget.slug if widget is not None else DEFAULT_WIDGET_SLUG,
        organization_id=organization.id,
        organization_name=organization.public_name,
        organization_email=organization.email,
        stripe_customer_id=organization.stripe_customer_id,
        is_active=widget.is_active if widget is not None else True,
        configured=widget is not None,
        config=WidgetConfigView(
            theme=resolve_theme(stored.get("theme")),
            settings=resolve_settings(stored.get("settings")),
            causes=[cause_view(cause) for cause in causes],
        ),
        webhook_url=settings.webhook_url,
    )


def cause_view(cause: Cause) -> CauseView:
    return CauseView(
        id=cause.id,
        name=cause.name,
        description=cause.description,
        goal_amount=cause.goal_amount,
        raised_amount=cause.raised_amount or 0,
        is_active=bool(cause.is_active),
    )
