"""
Security package: token verification, access logging, security headers and
the open CORS policy for embeddable endpoints.

Modules use structlog for logging and read their knobs from settings. Keep
interfaces small so they can be swapped by environment.
"""
