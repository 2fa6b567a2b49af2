"""
Health checking for the widget service.

The database and the organization/widget tables are required; the causes
table is optional because widget resolution degrades to an empty cause list
without it.
"""

import time
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.services.widget_metrics import get_widget_metrics
from app.utils.logger import get_logger

logger = get_logger(__name__)

REQUIRED_TABLES = ("organizations", "widgets")
OPTIONAL_TABLES = ("causes",)


class HealthStatus(str, Enum):
    """Health status levels"""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    """Health status for a system component"""

    name: str
    status: HealthStatus
    response_time_ms: Optional[float] = None
    error_message: Optional[str] = None
    last_check: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result["status"] = self.status.value
        result["last_check"] = self.last_check.isoformat()
        return result


@dataclass
class SystemHealth:
    """Overall system health status"""

    status: HealthStatus
    timestamp: datetime
    components: List[ComponentHealth]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
            "components": {comp.name: comp.to_dict() for comp in self.components},
        }


class HealthChecker:
    """Checks the database and the tables widget resolution reads."""

    def __init__(self, db: Session):
        self.db = db
        self.metrics = get_widget_metrics()

    def check_system_health(self) -> SystemHealth:
        database = self._check_database()
        components = [database]
        if database.status is HealthStatus.HEALTHY:
            components.extend(self._check_tables())

        overall = self._determine_overall_status(components)
        if overall is not HealthStatus.HEALTHY:
            logger.warning(
                "Health check not healthy",
                overall_status=overall.value,
                failing=[c.name for c in components if c.status is not HealthStatus.HEALTHY],
            )
        return SystemHealth(
            status=overall,
            timestamp=datetime.now(timezone.utc),
            components=components,
        )

    def _check_database(self) -> ComponentHealth:
        start_time = time.time()
        try:
            self.db.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            self.db.rollback()
            return ComponentHealth(
                name="database",
                status=HealthStatus.UNHEALTHY,
                error_message=f"Database error: {e.__class__.__name__}",
            )
        return ComponentHealth(
            name="database",
            status=HealthStatus.HEALTHY,
            response_time_ms=round((time.time() - start_time) * 1000, 2),
        )

    def _check_tables(self) -> List[ComponentHealth]:
        try:
            existing = set(inspect(self.db.get_bind()).get_table_names())
        except SQLAlchemyError as e:
            return [
                ComponentHealth(
                    name="schema",
                    status=HealthStatus.UNHEALTHY,
                    error_message=f"Schema inspection failed: {e.__class__.__name__}",
                )
            ]

        components = []
        for table in REQUIRED_TABLES + OPTIONAL_TABLES:
            if table in existing:
                components.append(ComponentHealth(name=table, status=HealthStatus.HEALTHY))
                continue
            required = table in REQUIRED_TABLES
            if not required:
                self.metrics.increment_degraded_dependency(table)
            components.append(
                ComponentHealth(
                    name=table,
                    status=HealthStatus.UNHEALTHY if required else HealthStatus.DEGRADED,
                    error_message="Table not provisioned",
                )
            )
        return components

    def _determine_overall_status(self, components: List[ComponentHealth]) -> HealthStatus:
        statuses = {c.status for c in components}
        if HealthStatus.UNHEALTHY in statuses:
            return HealthStatus.UNHEALTHY
        if HealthStatus.DEGRADED in statuses:
            return HealthStatus.DEGRADED
        return HealthStatus.HEALTHY
