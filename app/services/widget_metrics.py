"""
Widget-specific metrics collection and monitoring.
"""

import time
from typing import Dict

from prometheus_client import Counter, Histogram

# === Resolution Metrics ===

widget_resolutions_total = Counter(
    "widget_resolutions_total",
    "Widget configuration resolutions by variant and outcome",
    ["variant", "outcome"],
)

widget_resolution_duration_seconds = Histogram(
    "widget_resolution_duration_seconds",
    "Time spent resolving a widget configuration",
    ["variant"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1],
)

widget_degraded_dependency_total = Counter(
    "widget_degraded_dependency_total",
    "Resolutions that fell back to defaults because a dependency was missing",
    ["dependency"],
)

# === Embed Metrics ===

embed_renders_total = Counter(
    "embed_renders_total", "Embed markup renders by style", ["style"]
)

# === Donation Form Metrics ===

donation_validation_failures_total = Counter(
    "donation_validation_failures_total",
    "Donation submissions rejected by validation",
    ["reason"],
)

donation_handoffs_total = Counter(
    "donation_handoffs_total",
    "Validated donations handed off to the payment provider",
    ["mode"],
)

# === Error Metrics ===

widget_service_errors_total = Counter(
    "widget_service_errors_total",
    "Errors raised by the widget service",
    ["error_type", "category", "severity"],
)


class WidgetMetrics:
    """
    High-level interface over the widget Prometheus collectors.
    """

    def __init__(self):
        self.start_times: Dict[str, float] = {}

    def increment_resolution(self, variant: str, outcome: str):
        """Record a resolver call"""
        widget_resolutions_total.labels(variant=variant, outcome=outcome).inc()

    def record_resolution_time(self, variant: str, duration_ms: float):
        widget_resolution_duration_seconds.labels(variant=variant).observe(
            duration_ms / 1000
        )

    def increment_degraded_dependency(self, dependency: str):
        """Record a fallback to defaults"""
        widget_degraded_dependency_total.labels(dependency=dependency).inc()

    def increment_embed_render(self, style: str):
        embed_renders_total.labels(style=style).inc()

    def increment_validation_failure(self, reason: str):
        donation_validation_failures_total.labels(reason=reason).inc()

    def increment_handoff(self, mode: str):
        donation_handoffs_total.labels(mode=mode).inc()

    def increment_error_count(self, error_type: str, category: str, severity: str):
        """Record an error by type, category and severity"""
        widget_service_errors_total.labels(
            error_type=error_type, category=category, severity=severity
        ).inc()

    def time_resolution(self, variant: str) -> "TimingContext":
        """Context manager for timing a resolver call"""
        return TimingContext(self, variant)


class TimingContext:
    """Context manager for automatic timing of resolutions"""

    def __init__(self, metrics: WidgetMetrics, variant: str):
        self.metrics = metrics
        self.variant = variant
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time:
            duration_ms = (time.time() - self.start_time) * 1000
            self.metrics.record_resolution_time(self.variant, duration_ms)


# Global metrics instance
metrics = WidgetMetrics()


def get_widget_metrics() -> WidgetMetrics:
    """Get the global widget metrics instance"""
    return metrics
