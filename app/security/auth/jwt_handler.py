from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from app.core.config import settings


class Role(str, Enum):
    SUPER_ADMIN = "super_admin"
    OWNER = "owner"
    EDITOR = "editor"


class InvalidTokenError(ValueError):
    pass


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode()


def _b64url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


@dataclass
class JWTConfig:
    algorithm: str = "HS256"
    expires_minutes: int = 60
    issuer: Optional[str] = None


@dataclass(frozen=True)
class Principal:
    """Authenticated dashboard user as described by token claims."""

    subject: str
    role: Role
    organization_id: Optional[str] = None

    @property
    def is_super_admin(self) -> bool:
        return self.role is Role.SUPER_ADMIN

    def can_manage(self, organization_id: Optional[str]) -> bool:
        if self.is_super_admin:
            return True
        return organization_id is not None and self.organization_id == organization_id


class JWTHandler:
    """
    Minimal JWT HS256 implementation without external dependencies.
    For production, ensure SECRET_KEY is strong and rotated regularly.
    """

    def __init__(self, secret: str, config: Optional[JWTConfig] = None) -> None:
        self.secret = secret.encode()
        self.config = config or JWTConfig(
            algorithm=settings.JWT_ALGORITHM,
            expires_minutes=settings.JWT_EXPIRES_MINUTES,
            issuer=settings.JWT_ISSUER,
        )

    def create_token(
        self, subject: str, claims: Optional[Dict[str, Any]] = None
    ) -> str:
        header = {"alg": self.config.algorithm, "typ": "JWT"}
        now = int(time.time())
        payload = {
            "sub": subject,
            "iat": now,
            "exp": now + (self.config.expires_minutes * 60),
        }
        if self.config.issuer:
            payload["iss"] = self.config.issuer
        if claims:
            payload.update(claims)

        header_b64 = _b64url_encode(json.dumps(header, separators=(",", ":")).encode())
        payload_b64 = _b64url_encode(
            json.dumps(payload, separators=(",", ":")).encode()
        )
        signing_input = f"{header_b64}.{payload_b64}".encode()
        signature = hmac.new(self.secret, signing_input, hashlib.sha256).digest()
        return f"{header_b64}.{payload_b64}.{_b64url_encode(signature)}"

    def create_access_token(
        self, subject: str, role: Role, organization_id: Optional[str] = None
    ) -> str:
        claims: Dict[str, Any] = {"role": Role(role).value}
        if organization_id:
            claims["org_id"] = organization_id
        return self.create_token(subject, claims)

    def verify_token(self, token: str) -> Dict[str, Any]:
        try:
            header_b64, payload_b64, signature_b64 = token.split(".")
            header = json.loads(_b64url_decode(header_b64))
            signature = _b64url_decode(signature_b64)
            payload = json.loads(_b64url_decode(payload_b64))
        except (ValueError, binascii.Error) as exc:
            raise InvalidTokenError(f"Malformed token: {exc}") from exc

        if not isinstance(header, dict) or header.get("alg") != self.config.algorithm:
            raise InvalidTokenError("Unsupported algorithm")
        signing_input = f"{header_b64}.{payload_b64}".encode()
        expected = hmac.new(self.secret, signing_input, hashlib.sha256).digest()
        if not hmac.compare_digest(expected, signature):
            raise InvalidTokenError("Invalid signature")
        if not isinstance(payload, dict):
            raise InvalidTokenError("Invalid payload")

        exp = payload.get("exp")
        if exp is not None and not isinstance(exp, (int, float)):
            raise InvalidTokenError("Invalid expiry")
        if exp is not None and int(time.time()) > int(exp):
            raise InvalidTokenError("Token expired")
        if self.config.issuer and payload.get("iss") != self.config.issuer:
            raise InvalidTokenError("Invalid issuer")
        return payload

    def principal_from_token(self, token: str) -> Principal:
        payload = self.verify_token(token)
        subject = payload.get("sub")
        if not subject:
            raise InvalidTokenError("Missing subject")
        try:
            role = Role(payload.get("role"))
        except ValueError as exc:
            raise InvalidTokenError("Unknown role") from exc
        return Principal(
            subject=str(subject), role=role, organization_id=payload.get("org_id")
        )


def get_jwt_handler() -> JWTHandler:
    return JWTHandler(settings.SECRET_KEY)
