"""Database-backed configuration store for organizations, widgets and causes."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.api.v1.widget_schemas import WidgetSettingsView, WidgetThemeView
from app.core.config import settings
from app.models.organization import Organization
from app.models.widget import Cause, Widget
from app.services.widgets.defaults import DEFAULT_SETTINGS, DEFAULT_THEME
from app.services.widgets.slugs import slugify, validate_slug
from app.utils.error_handler import (
    CauseLimitExceededError,
    CauseNotFoundError,
    ConfigurationValidationError,
    OrganizationNotFoundError,
    SlugConflictError,
    WidgetAlreadyExistsError,
)
from app.utils.logger import get_logger

logger = get_logger(__name__)


class WidgetConfigStore:
    """Reads used by the resolver, plus the admin editor's write path."""

    def __init__(self, db_session: Session, *, max_causes: Optional[int] = None) -> None:
        self._db = db_session
        self.max_causes = max_causes or settings.MAX_CAUSES_PER_WIDGET

    # === Reads ===

    def get_organization(self, organization_id: str) -> Optional[Organization]:
        return self._db.get(Organization, organization_id)

    def get_widget_for_organization(self, organization_id: str) -> Optional[Widget]:
        """Return the organization's widget (at most one is expected)."""
        return (
            self._db.query(Widget)
            .filter(Widget.organization_id == organization_id)
            .order_by(Widget.created_at, Widget.id)
            .first()
        )

    def get_widget_by_slug(
        self, slug: str, *, active_only: bool = False
    ) -> Optional[Widget]:
        query = self._db.query(Widget).filter(Widget.slug == slug)
        if active_only:
            query = query.filter(Widget.is_active.is_(True))
        return query.first()

    def list_causes(self, widget_id: str, *, active_only: bool) -> List[Cause]:
        """Causes of a widget in editor order. Storage errors propagate."""
        query = self._db.query(Cause).filter(Cause.widget_id == widget_id)
        if active_only:
            query = query.filter(Cause.is_active.is_(True))
        return query.order_by(Cause.position, Cause.created_at).all()

    def rollback(self) -> None:
        self._db.rollback()

    # === Widget writes ===

    def create_widget(
        self,
        organization_id: str,
        name: str,
        slug: Optional[str] = None,
        *,
        is_active: bool = True,
    ) -> Widget:
        if self.get_organization(organization_id) is None:
            raise OrganizationNotFoundError(organization_id)
        if self.get_widget_for_organization(organization_id) is not None:
            raise WidgetAlreadyExistsError(organization_id)

        slug = slug if slug is not None else slugify(name)
        problem = validate_slug(slug)
        if problem:
            raise ConfigurationValidationError(problem, technical_details={"slug": slug})
        if self.get_widget_by_slug(slug) is not None:
            raise SlugConflictError(slug)

        widget = Widget(
            organization_id=organization_id,
            name=name.strip(),
            slug=slug,
            config={},
            is_active=is_active,
        )
        self._db.add(widget)
        self._db.commit()
        self._db.refresh(widget)
        logger.info("Widget created", widget_id=widget.id, slug=slug)
        return widget

    def update_widget(
        self,
        widget: Widget,
        *,
        name: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Widget:
        if name is not None:
            if not name.strip():
                raise ConfigurationValidationError("Widget name is required")
            widget.name = name.strip()
        if is_active is not None:
            widget.is_active = is_active
        self._db.add(widget)
        self._db.commit()
        self._db.refresh(widget)
        return widget

    def save_config(
        self,
        widget: Widget,
        *,
        theme: Optional[Dict[str, Any]] = None,
        settings_update: Optional[Dict[str, Any]] = None,
    ) -> Widget:
        """
        Apply partial theme/settings edits on top of what is stored.

        Only keys present in the update change; the merged result must
        validate against the full schema before it is written.
        """
        stored = dict(widget.config or {})
        for section, update in (("theme", theme), ("settings", settings_update)):
            if not update:
                continue
            current = stored.get(section)
            merged = dict(current) if isinstance(current, dict) else {}
            merged.update(update)
            stored[section] = merged

        _validate_section(DEFAULT_THEME, stored.get("theme"), WidgetThemeView, "theme")
        _validate_section(
            DEFAULT_SETTINGS, stored.get("settings"), WidgetSettingsView, "settings"
        )

        # Reassign so the JSON column is flagged dirty.
        widget.config = stored
        self._db.add(widget)
        self._db.commit()
        self._db.refresh(widget)
        logger.info(
            "Widget config saved",
            widget_id=widget.id,
            theme_keys=sorted((theme or {}).keys()),
            settings_keys=sorted((settings_update or {}).keys()),
        )
        return widget

    # === Cause writes ===

    def add_cause(
        self,
        widget: Widget,
        name: str,
        description: Optional[str] = None,
        goal_amount: Optional[int] = None,
    ) -> Cause:
        clean_name = (name or "").strip()
        if not clean_name:
            raise ConfigurationValidationError("Cause name is required")

        count, last_position = (
            self._db.query(func.count(Cause.id), func.max(Cause.position))
            .filter(Cause.widget_id == widget.id)
            .one()
        )
        if count >= self.max_causes:
            raise CauseLimitExceededError(self.max_causes)

        cause = Cause(
            widget_id=widget.id,
            name=clean_name,
            description=(description or "").strip() or None,
            goal_amount=goal_amount,
            raised_amount=0,
            is_active=True,
            position=0 if last_position is None else last_position + 1,
        )
        self._db.add(cause)
        self._db.commit()
        self._db.refresh(cause)
        return cause

    def get_cause(self, widget: Widget, cause_id: str) -> Cause:
        cause = self._db.get(Cause, cause_id)
        if cause is None or cause.widget_id != widget.id:
            raise CauseNotFoundError(cause_id)
        return cause

    def update_cause(self, widget: Widget, cause_id: str, **changes: Any) -> Cause:
        cause = self.get_cause(widget, cause_id)
        if "name" in changes and changes["name"] is not None:
            clean_name = changes["name"].strip()
            if not clean_name:
                raise ConfigurationValidationError("Cause name is required")
            cause.name = clean_name
        if "description" in changes and changes["description"] is not None:
            cause.description = changes["description"].strip() or None
        if "goal_amount" in changes and changes["goal_amount"] is not None:
            cause.goal_amount = changes["goal_amount"]
        if "is_active" in changes and changes["is_active"] is not None:
            cause.is_active = changes["is_active"]
        self._db.add(cause)
        self._db.commit()
        self._db.refresh(cause)
        return cause

    def delete_cause(self, widget: Widget, cause_id: str) -> None:
        cause = self.get_cause(widget, cause_id)
        self._db.delete(cause)
        self._db.commit()


def _validate_section(
    defaults: Dict[str, Any],
    stored: Optional[Dict[str, Any]],
    model: Type[BaseModel],
    section: str,
) -> None:
    """Strict check used on writes; reads degrade instead of failing."""
    try:
        model.model_validate({**defaults, **(stored or {})})
    except ValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
        raise ConfigurationValidationError(
            f"Invalid {section} configuration",
            technical_details={"section": section, "fields": fields},
        ) from exc
