# Import all the models, so that Base has them before being
# imported by Alembic
from app.db.base_class import Base
from app.models.organization import Organization
from app.models.widget import Cause, Widget

__all__ = ["Base", "Organization", "Widget", "Cause"]  # noqa: F401
