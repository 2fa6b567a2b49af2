"""
Monitoring & Observability package

Includes:
- tracing: correlation IDs bound into structlog contextvars
"""
