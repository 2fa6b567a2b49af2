"""Pydantic request/response schemas for the widget-facing API."""

from __future__ import annotations

from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from app.core.config import settings

HeaderAlignment = Literal["left", "center", "right"]
DonationFrequency = Literal["one-time", "monthly", "yearly"]
EmbedStyle = Literal["inline", "modal", "sidebar"]
ShortcodeSyntax = Literal["wordpress", "drupal"]
PositiveCents = Annotated[int, Field(gt=0)]


class BaseApiModel(BaseModel):
    """Base class enabling alias-friendly export."""

    model_config = ConfigDict(populate_by_name=True)


def _css_length(value: object) -> object:
    # Older records stored the radius as a bare number of pixels.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"{value:g}px"
    return value


CssLength = Annotated[str, BeforeValidator(_css_length)]


# === Widget configuration ===


class WidgetThemeView(BaseApiModel):
    primary_color: str = Field(alias="primaryColor", min_length=1)
    secondary_color: str = Field(alias="secondaryColor", min_length=1)
    background_color: str = Field(alias="backgroundColor", min_length=1)
    text_color: str = Field(alias="textColor", min_length=1)
    header_color: str = Field(alias="headerColor", min_length=1)
    button_text_color: str = Field(alias="buttonTextColor", min_length=1)
    font_family: str = Field(alias="fontFamily", min_length=1)
    border_radius: CssLength = Field(alias="borderRadius", min_length=1)
    custom_css: str = Field(alias="customCss")
    header_text: str = Field(alias="headerText")
    header_alignment: HeaderAlignment = Field(alias="headerAlignment")


class WidgetSettingsView(BaseApiModel):
    show_progress_bar: bool = Field(alias="showProgressBar")
    show_donor_list: bool = Field(alias="showDonorList")
    allow_recurring: bool = Field(alias="allowRecurring")
    minimum_donation: int = Field(alias="minimumDonation", ge=1)
    suggested_amounts: List[PositiveCents] = Field(alias="suggestedAmounts")
    show_cover_fees: bool = Field(alias="showCoverFees")
    default_frequency: DonationFrequency = Field(alias="defaultFrequency")


class CauseView(BaseApiModel):
    id: str
    name: str
    description: Optional[str] = None
    goal_amount: Optional[int] = Field(default=None, alias="goalAmount")
    raised_amount: int = Field(default=0, alias="raisedAmount", ge=0)
    is_active: bool = Field(default=True, alias="isActive")


class WidgetConfigView(BaseApiModel):
    theme: WidgetThemeView
    settings: WidgetSettingsView
    causes: List[CauseView] = []


class ResolvedWidgetConfig(BaseApiModel):
    id: str
    name: str
    slug: str
    organization_id: str = Field(alias="organizationId")
    organization_name: str = Field(alias="organizationName")
    organization_email: Optional[str] = Field(default=None, alias="organizationEmail")
    stripe_customer_id: Optional[str] = Field(default=None, alias="stripeCustomerId")
    is_active: bool = Field(default=True, alias="isActive")
    configured: bool = True
    config: WidgetConfigView
    webhook_url: str = Field(alias="webhookUrl")


# === Donation form ===


class DonationSubmission(BaseApiModel):
    """Donor input posted by the widget page for server-side revalidation."""

    amount: Optional[int] = Field(
        default=None,
        le=settings.MAX_DONATION_CENTS,
        description="Suggested amount in cents",
    )
    custom_amount: Optional[str] = Field(default=None, alias="customAmount")
    cause_id: Optional[str] = Field(default=None, alias="causeId")
    frequency: Optional[DonationFrequency] = None

    @model_validator(mode="after")
    def _one_amount_source(self) -> "DonationSubmission":
        if self.amount is not None and (self.custom_amount or "").strip():
            raise ValueError("amount and customAmount are mutually exclusive")
        return self


class ValidationIssueView(BaseApiModel):
    field: str
    message: str


class DonationHandoffView(BaseApiModel):
    amount: int
    cause_id: Optional[str] = Field(default=None, alias="causeId")
    frequency: DonationFrequency
    organization_id: str = Field(alias="organizationId")
    organization_name: str = Field(alias="organizationName")
    stripe_customer_id: Optional[str] = Field(default=None, alias="stripeCustomerId")
    widget_id: str = Field(alias="widgetId")


class DonationResultView(BaseApiModel):
    ok: bool
    preview: bool = False
    message: Optional[str] = None
    handoff: Optional[DonationHandoffView] = None
    issues: List[ValidationIssueView] = []


# === Embeds ===


class EmbedSnippetView(BaseApiModel):
    widget_id: str = Field(alias="widgetId")
    style: EmbedStyle
    html: str
    script_tag: str = Field(alias="scriptTag")
    host_markup: str = Field(alias="hostMarkup")


class ShortcodeExpandRequest(BaseApiModel):
    text: str
    syntax: ShortcodeSyntax
    domain: Optional[str] = None


class ShortcodeExpandResponse(BaseApiModel):
    html: str


# === Admin editor ===


class WidgetThemeUpdate(BaseApiModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    primary_color: Optional[str] = Field(default=None, alias="primaryColor")
    secondary_color: Optional[str] = Field(default=None, alias="secondaryColor")
    background_color: Optional[str] = Field(default=None, alias="backgroundColor")
    text_color: Optional[str] = Field(default=None, alias="textColor")
    header_color: Optional[str] = Field(default=None, alias="headerColor")
    button_text_color: Optional[str] = Field(default=None, alias="buttonTextColor")
    font_family: Optional[str] = Field(default=None, alias="fontFamily")
    border_radius: Optional[CssLength] = Field(default=None, alias="borderRadius")
    custom_css: Optional[str] = Field(default=None, alias="customCss")
    header_text: Optional[str] = Field(default=None, alias="headerText")
    header_alignment: Optional[HeaderAlignment] = Field(
        default=None, alias="headerAlignment"
    )


class WidgetSettingsUpdate(BaseApiModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    show_progress_bar: Optional[bool] = Field(default=None, alias="showProgressBar")
    show_donor_list: Optional[bool] = Field(default=None, alias="showDonorList")
    allow_recurring: Optional[bool] = Field(default=None, alias="allowRecurring")
    minimum_donation: Optional[int] = Field(default=None, alias="minimumDonation", ge=1)
    suggested_amounts: Optional[List[PositiveCents]] = Field(
        default=None, alias="suggestedAmounts"
    )
    show_cover_fees: Optional[bool] = Field(default=None, alias="showCoverFees")
    default_frequency: Optional[DonationFrequency] = Field(
        default=None, alias="defaultFrequency"
    )


class WidgetConfigUpdateRequest(BaseApiModel):
    theme: Optional[WidgetThemeUpdate] = None
    settings: Optional[WidgetSettingsUpdate] = None


class WidgetCreateRequest(BaseApiModel):
    organization_id: str = Field(alias="organizationId")
    name: str = Field(min_length=1, max_length=255)
    slug: Optional[str] = None
    is_active: bool = Field(default=True, alias="isActive")


class WidgetUpdateRequest(BaseApiModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    is_active: Optional[bool] = Field(default=None, alias="isActive")


class WidgetSummaryView(BaseApiModel):
    id: str
    organization_id: str = Field(alias="organizationId")
    name: str
    slug: str
    is_active: bool = Field(alias="isActive")
    config: WidgetConfigView


class CauseCreateRequest(BaseApiModel):
    name: str
    description: Optional[str] = None
    goal_amount: Optional[int] = Field(default=None, alias="goalAmount", ge=0)


class CauseUpdateRequest(BaseApiModel):
    name: Optional[str] = None
    description: Optional[str] = None
    goal_amount: Optional[int] = Field(default=None, alias="goalAmount", ge=0)
    is_active: Optional[bool] = Field(default=None, alias="isActive")
