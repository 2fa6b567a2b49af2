"""
Donation form state for widget pages.

Mirrors what the browser-side widget script does so that submissions can be
revalidated on the server with the same rules:

    loading -> not_found | ready

While ready, picking a suggested amount clears the custom amount and typing
a custom amount clears the picked one; the last action wins. Submitting
never changes the phase. It either returns validation issues or a handoff
for the payment provider (or, in admin preview, a confirmation message).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Dict, List, Optional

from app.api.v1.widget_schemas import (
    DonationHandoffView,
    DonationResultView,
    DonationSubmission,
    ResolvedWidgetConfig,
    ValidationIssueView,
)
from app.core.config import settings
from app.services.widget_metrics import get_widget_metrics

metrics = get_widget_metrics()


class FormPhase(str, Enum):
    LOADING = "loading"
    NOT_FOUND = "not_found"
    READY = "ready"


class FormStateError(RuntimeError):
    """Raised when an action is applied in a phase that does not allow it."""


@dataclass(slots=True)
class ValidationIssue:
    field: str
    message: str
    reason: str


@dataclass
class DonationForm:
    """Single-session donation form; not shared between requests."""

    minimum_cents: int = field(default_factory=lambda: settings.DONATION_MINIMUM_CENTS)
    maximum_cents: int = field(default_factory=lambda: settings.MAX_DONATION_CENTS)
    preview: bool = False
    phase: FormPhase = FormPhase.LOADING
    widget: Optional[ResolvedWidgetConfig] = None
    selected_amount: Optional[int] = None
    custom_amount: str = ""
    selected_cause: Optional[str] = None
    frequency: Optional[str] = None

    # === Transitions ===

    def load(self, widget: Optional[ResolvedWidgetConfig]) -> FormPhase:
        if self.phase is not FormPhase.LOADING:
            raise FormStateError(f"form already {self.phase.value}")
        if widget is None:
            self.phase = FormPhase.NOT_FOUND
            return self.phase

        self.widget = widget
        self.minimum_cents = max(self.minimum_cents, widget.config.settings.minimum_donation)
        self.frequency = widget.config.settings.default_frequency
        causes = widget.config.causes
        if len(causes) == 1:
            self.selected_cause = causes[0].id
        self.phase = FormPhase.READY
        return self.phase

    def select_cause(self, cause_id: str) -> None:
        self._require_ready()
        if cause_id not in self.cause_ids:
            raise ValueError(f"unknown cause: {cause_id}")
        self.selected_cause = cause_id

    def select_amount(self, cents: int) -> None:
        self._require_ready()
        self.selected_amount = cents
        self.custom_amount = ""

    def enter_custom_amount(self, text: str) -> None:
        self._require_ready()
        self.custom_amount = text
        self.selected_amount = None

    def choose_frequency(self, frequency: str) -> None:
        self._require_ready()
        if frequency != "one-time" and not self.widget.config.settings.allow_recurring:
            raise ValueError("recurring donations are disabled for this widget")
        self.frequency = frequency

    # === Derived state ===

    @property
    def cause_ids(self) -> List[str]:
        if self.widget is None:
            return []
        return [cause.id for cause in self.widget.config.causes]

    @property
    def limits(self) -> Dict[str, int]:
        """Amount bounds in cents, shared with the browser script."""
        return {"minimum": self.minimum_cents, "maximum": self.maximum_cents}

    @property
    def amount_cents(self) -> Optional[int]:
        """Selected amount, or the custom dollar amount converted to cents."""
        if self.selected_amount is not None:
            return self.selected_amount
        return parse_custom_amount(self.custom_amount)

    def validate(self) -> List[ValidationIssue]:
        self._require_ready()
        issues: List[ValidationIssue] = []
        amount = self.amount_cents
        if amount is None or amount < self.minimum_cents:
            issues.append(
                ValidationIssue(
                    field="amount",
                    message=(
                        "Please select or enter a donation amount of at least "
                        f"{format_cents(self.minimum_cents)}"
                    ),
                    reason="amount_missing" if amount is None else "amount_too_small",
                )
            )
        elif amount > self.maximum_cents:
            issues.append(
                ValidationIssue(
                    field="amount",
                    message=(
                        "Please enter a donation amount of at most "
                        f"{format_cents(self.maximum_cents)}"
                    ),
                    reason="amount_too_large",
                )
            )
        if self.selected_cause is None and len(self.cause_ids) > 1:
            issues.append(
                ValidationIssue(
                    field="cause",
                    message="Please select a cause to support",
                    reason="cause_required",
                )
            )
        return issues

    def submit(self) -> DonationResultView:
        issues = self.validate()
        if issues:
            for issue in issues:
                metrics.increment_validation_failure(issue.reason)
            return DonationResultView(
                ok=False,
                preview=self.preview,
                issues=[
                    ValidationIssueView(field=issue.field, message=issue.message)
                    for issue in issues
                ],
            )

        amount = self.amount_cents
        widget = self.widget
        if self.preview:
            metrics.increment_handoff("preview")
            return DonationResultView(
                ok=True,
                preview=True,
                message=(
                    f"[ADMIN PREVIEW] This would process a donation of "
                    f"{format_cents(amount)} to {widget.organization_name}. "
                    "No actual payment will be processed in admin preview mode."
                ),
            )

        metrics.increment_handoff("live")
        return DonationResultView(
            ok=True,
            message=(
                f"Processing donation of {format_cents(amount)} "
                f"to {widget.organization_name}"
            ),
            handoff=DonationHandoffView(
                amount=amount,
                cause_id=self.selected_cause,
                frequency=self.frequency or widget.config.settings.default_frequency,
                organization_id=widget.organization_id,
                organization_name=widget.organization_name,
                stripe_customer_id=widget.stripe_customer_id,
                widget_id=widget.id,
            ),
        )

    def _require_ready(self) -> None:
        if self.phase is not FormPhase.READY:
            raise FormStateError(f"form is {self.phase.value}, not ready")


def parse_custom_amount(text: Optional[str]) -> Optional[int]:
    """Parse a dollar amount typed by a donor into cents; None if unusable."""
    if text is None or not text.strip():
        return None
    try:
        dollars = Decimal(text.strip().lstrip("$").replace(",", ""))
    except InvalidOperation:
        return None
    if not dollars.is_finite() or dollars <= 0:
        return None
    # Absurd magnitudes collapse to one cent over the ceiling; validation rejects them.
    ceiling = settings.MAX_DONATION_CENTS + 1
    if dollars >= Decimal(ceiling) / 100:
        return ceiling
    return int((dollars * 100).to_integral_value())


def format_cents(cents: int) -> str:
    sign = "-" if cents < 0 else ""
    dollars, remainder = divmod(abs(cents), 100)
    return f"{sign}${dollars:,}.{remainder:02d}"


def submit_donation(
    widget: ResolvedWidgetConfig,
    submission: DonationSubmission,
    *,
    preview: bool = False,
) -> DonationResultView:
    """Replay a posted submission through a fresh form and submit it."""
    form = DonationForm(preview=preview)
    form.load(widget)

    if submission.amount is not None:
        form.select_amount(submission.amount)
    elif submission.custom_amount is not None:
        form.enter_custom_amount(submission.custom_amount)

    rejected: List[ValidationIssueView] = []
    if submission.cause_id:
        try:
            form.select_cause(submission.cause_id)
        except ValueError:
            metrics.increment_validation_failure("unknown_cause")
            rejected.append(
                ValidationIssueView(field="cause", message="Please select a cause to support")
            )
    if submission.frequency:
        try:
            form.choose_frequency(submission.frequency)
        except ValueError:
            metrics.increment_validation_failure("recurring_disabled")
            rejected.append(
                ValidationIssueView(
                    field="frequency",
                    message="Recurring donations are not available for this widget",
                )
            )

    if not rejected:
        return form.submit()
    issues = [
        ValidationIssueView(field=issue.field, message=issue.message)
        for issue in form.validate()
    ]
    seen = {issue.field for issue in issues}
    issues.extend(issue for issue in rejected if issue.field not in seen)
    return DonationResultView(ok=False, preview=preview, issues=issues)
