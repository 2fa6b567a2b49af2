#!/usr/bin/env python3
"""Seed a demo organization with an active widget and a few causes."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.db.session import SessionLocal
from app.models import Cause, Organization, Widget
from app.services.widgets.defaults import DEFAULT_SETTINGS, DEFAULT_THEME
from app.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)

DEMO_SLUG = "demo-widget"

DEMO_CAUSES = [
    {
        "name": "Clean Water",
        "description": "Wells and filters for rural schools",
        "goal_amount": 2_500_000,
        "raised_amount": 1_120_000,
    },
    {
        "name": "School Meals",
        "description": "A hot lunch for every pupil",
        "goal_amount": 1_000_000,
        "raised_amount": 245_000,
    },
    {"name": "Where Most Needed", "description": None, "goal_amount": None},
]


def _create_demo(db: Session) -> Widget:
    organization = Organization(
        name="PassItOn Demo Charity",
        display_name="Demo Charity",
        email="demo@passiton.example",
    )
    db.add(organization)
    db.flush()

    widget = Widget(
        organization_id=organization.id,
        name="Demo Widget",
        slug=DEMO_SLUG,
        config={
            "theme": {**DEFAULT_THEME, "headerText": "Support our work"},
            "settings": dict(DEFAULT_SETTINGS),
        },
        is_active=True,
    )
    db.add(widget)
    db.flush()

    for position, cause in enumerate(DEMO_CAUSES):
        db.add(Cause(widget_id=widget.id, position=position, is_active=True, **cause))
    return widget


def seed_demo_widget() -> None:
    logger.info("Seeding demo widget", slug=DEMO_SLUG)
    db = SessionLocal()
    try:
        if db.query(Widget).filter(Widget.slug == DEMO_SLUG).first() is not None:
            logger.info("Demo widget already present", slug=DEMO_SLUG)
            return

        widget = _create_demo(db)
        db.commit()
        logger.info(
            "Seeded demo widget",
            slug=widget.slug,
            organization_id=widget.organization_id,
            causes=len(DEMO_CAUSES),
        )
    except Exception:
        logger.exception("Failed to seed demo widget")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging()
    seed_demo_widget()
