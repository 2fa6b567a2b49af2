"""Widget configuration store, resolver and donation form."""

__all__ = [
    "defaults",
    "slugs",
    "store",
    "resolver",
    "donation_form",
]
