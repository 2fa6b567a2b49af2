"""Persistence models for embeddable widgets and their causes."""

from __future__ import annotations

import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from app.db.base_class import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Widget(Base):
    """One organization's donation widget, addressed publicly by slug."""

    __tablename__ = "widgets"

    id = Column(String, primary_key=True, default=_new_id)
    organization_id = Column(
        String,
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False)
    slug = Column(String(50), nullable=False, unique=True, index=True)
    config = Column(JSON, nullable=False, default=dict)  # {"theme": {...}, "settings": {...}}
    is_active = Column(Boolean, nullable=False, default=True)

    organization = relationship("Organization", back_populates="widgets")
    causes = relationship(
        "Cause",
        back_populates="widget",
        cascade="all, delete-orphan",
        order_by="Cause.position",
    )


class Cause(Base):
    """A fundraising target donors can pick inside a widget."""

    __tablename__ = "causes"

    id = Column(String, primary_key=True, default=_new_id)
    widget_id = Column(
        String, ForeignKey("widgets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    goal_amount = Column(Integer, nullable=True)  # cents
    raised_amount = Column(Integer, nullable=False, default=0)  # cents
    is_active = Column(Boolean, nullable=False, default=True)
    position = Column(Integer, nullable=False, default=0)

    widget = relationship("Widget", back_populates="causes")
