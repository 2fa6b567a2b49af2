import sentry_sdk
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from prometheus_fastapi_instrumentator import Instrumentator
from sentry_sdk.integrations.asgi import SentryAsgiMiddleware
from sqlalchemy.orm import Session

from app.api.v1 import admin_widgets as admin_widget_routes
from app.api.v1 import embeds as embed_routes
from app.api.v1 import security as security_routes
from app.api.v1 import widget_config as widget_config_routes
from app.api.v1 import widget_pages as widget_page_routes
from app.core.config import settings
from app.db.session import get_db
from app.monitoring.tracing.correlation import CorrelationIdMiddleware
from app.security.audit.access_logger import AccessLogMiddleware
from app.security.validation.public_cors import PublicCorsMiddleware
from app.security.validation.security_headers import SecurityHeadersMiddleware
from app.services.health_check import HealthChecker, HealthStatus
from app.utils.error_handler import register_exception_handlers
from app.utils.logger import configure_logging, get_logger
from app.web.templating import STATIC_DIR

# Configure logging before anything else
configure_logging()
logger = get_logger(__name__)

app = FastAPI(
    title="PassItOn Widget Service",
    description=(
        "Widget configuration, embeddable donation widgets and hosted "
        "donation pages for PassItOn organizations"
    ),
    version="1.0.0",
)

# Initialize Sentry if DSN is provided
if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.APP_ENV,
        traces_sample_rate=0.1,
    )
    app.add_middleware(SentryAsgiMiddleware)
    logger.info(
        "Sentry initialized with SentryAsgiMiddleware", environment=settings.APP_ENV
    )
else:
    logger.info("Sentry not configured (SENTRY_DSN not set)")

# Dashboard origins only; public embed paths are opened up below
allowed_origins = settings.CORS_ALLOW_ORIGINS or ["http://localhost:3000"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Security middleware (headers + access logs)
if settings.ENABLE_SECURITY_HEADERS:
    app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(AccessLogMiddleware)
app.add_middleware(CorrelationIdMiddleware)
# Outermost, so embed preflights never reach the dashboard CORS policy
app.add_middleware(PublicCorsMiddleware)

register_exception_handlers(app)

app.include_router(widget_config_routes.router, prefix="/api/v1")
app.include_router(embed_routes.router, prefix="/api/v1")
app.include_router(admin_widget_routes.router, prefix="/api/v1")
app.include_router(security_routes.router, prefix="/api/v1")
app.include_router(widget_page_routes.router)

app.mount("/embed", StaticFiles(directory=STATIC_DIR / "embed"), name="embed")
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

# Initialize Prometheus metrics
instrumentator = Instrumentator(
    should_group_status_codes=False,
    excluded_handlers=["/metrics"],  # Don't monitor the metrics endpoint itself
)
instrumentator.instrument(app).expose(app)


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    logger.info(
        "PassItOn widget service starting up",
        app_name=settings.APP_NAME,
        environment=settings.APP_ENV,
        public_base_url=settings.PUBLIC_BASE_URL,
        sentry_enabled=bool(settings.SENTRY_DSN),
    )


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Health check endpoint"""
    health = HealthChecker(db).check_system_health()
    status_code = 503 if health.status is HealthStatus.UNHEALTHY else 200
    return JSONResponse(status_code=status_code, content=health.to_dict())
