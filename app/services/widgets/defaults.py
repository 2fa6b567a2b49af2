"""Default widget appearance/behaviour and the merge that applies them."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Type, TypeVar

from pydantic import BaseModel, ValidationError

from app.api.v1.widget_schemas import WidgetSettingsView, WidgetThemeView
from app.utils.logger import get_logger

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

DEFAULT_THEME: Dict[str, Any] = {
    "primaryColor": "#0891B2",
    "secondaryColor": "#0F766E",
    "backgroundColor": "#FFFFFF",
    "textColor": "#1F2937",
    "headerColor": "#0F172A",
    "buttonTextColor": "#FFFFFF",
    "fontFamily": "Inter",
    "borderRadius": "8px",
    "customCss": "",
    "headerText": "PassItOn",
    "headerAlignment": "center",
}

DEFAULT_SETTINGS: Dict[str, Any] = {
    "showProgressBar": True,
    "showDonorList": True,
    "allowRecurring": True,
    "minimumDonation": 100,
    "suggestedAmounts": [1000, 3000, 6000, 10000, 20000],
    "showCoverFees": True,
    "defaultFrequency": "one-time",
}

DEFAULT_WIDGET_ID = "default"
DEFAULT_WIDGET_NAME = "Default Widget"
DEFAULT_WIDGET_SLUG = "default"


def merge_over_defaults(
    defaults: Mapping[str, Any],
    stored: Any,
    model: Type[M],
    *,
    section: str,
) -> M:
    """
    Overlay a stored (possibly partial) config section on its defaults.

    Keys are merged one by one, so a record written before a field existed
    still gets that field's default. ``None`` values and values that fail
    validation count as absent. Unknown keys are dropped.
    """
    merged: Dict[str, Any] = dict(defaults)
    if isinstance(stored, Mapping):
        for key, value in stored.items():
            if key in defaults and value is not None:
                merged[key] = value
    elif stored is not None:
        logger.warning(
            "Ignoring non-object widget config section",
            section=section,
            stored_type=type(stored).__name__,
        )

    try:
        return model.model_validate(merged)
    except ValidationError as exc:
        rejected = sorted(
            {str(err["loc"][0]) for err in exc.errors() if err.get("loc")}
        )
        logger.warning(
            "Stored widget config values failed validation, using defaults",
            section=section,
            fields=rejected,
        )
        for key in rejected:
            if key in defaults:
                merged[key] = defaults[key]
        return model.model_validate(merged)


def resolve_theme(stored: Any) -> WidgetThemeView:
    return merge_over_defaults(DEFAULT_THEME, stored, WidgetThemeView, section="theme")


def resolve_settings(stored: Any) -> WidgetSettingsView:
    return merge_over_defaults(
        DEFAULT_SETTINGS, stored, WidgetSettingsView, section="settings"
    )
