from .organization import Organization
from .widget import Cause, Widget

__all__ = [
    "Organization",
    "Widget",
    "Cause",
]
