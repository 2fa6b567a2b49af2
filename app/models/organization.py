"""Organizations that own donation widgets."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from app.db.base_class import Base


class Organization(Base):
    __tablename__ = "organizations"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    display_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    stripe_customer_id = Column(String(255), nullable=True)

    widgets = relationship(
        "Widget", back_populates="organization", cascade="all, delete-orphan"
    )

    @property
    def public_name(self) -> str:
        return self.display_name or self.name
