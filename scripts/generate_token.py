#!/usr/bin/env python3
"""
Generates a dashboard JWT for a given subject, role and organization.
"""
import sys

from app.security.auth.jwt_handler import Role, get_jwt_handler

USAGE = (
    "Usage: python scripts/generate_token.py <subject> "
    "[super_admin|owner|editor] [organization_id]"
)


def generate_token(subject: str, role: str = "owner", organization_id: str = None):
    """
    Generates a JWT carrying the role and organization claims the admin routes check.
    """
    jwt_handler = get_jwt_handler()
    token = jwt_handler.create_access_token(subject, Role(role), organization_id)
    print(token)


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(USAGE)
        sys.exit(1)
    try:
        generate_token(*sys.argv[1:4])
    except ValueError:
        print(USAGE)
        sys.exit(1)
