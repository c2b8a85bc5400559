"""
Bearer credential issuing and verification.

Verification never raises: it returns a ``TokenVerification`` whose ``status``
tag tells the caller exactly what happened, and callers branch on that tag.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Literal, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from app.core.settings import get_settings

Role = Literal["admin", "voter"]
ROLES = ("admin", "voter")


class TokenStatus(str, Enum):
    VALID = "valid"
    EXPIRED = "expired"
    MALFORMED = "malformed"
    # signature checks out but the claims do not name a known principal
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Claims:
    user_id: int
    role: Role


@dataclass(frozen=True)
class TokenVerification:
    status: TokenStatus
    claims: Optional[Claims] = None

    @property
    def valid(self) -> bool:
        return self.status is TokenStatus.VALID


def _jwt_config() -> tuple[str, str]:
    settings = get_settings()
    return settings.jwt_secret, settings.jwt_algorithm


def create_access_token(user_id: int, role: Role, expires_delta: Optional[timedelta] = None) -> str:
    if expires_delta is None:
        expires_delta = timedelta(minutes=get_settings().access_token_expire_minutes)
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sub": str(user_id),
        "role": role,
        "iat": now,
        "exp": now + expires_delta,
    }
    secret, algorithm = _jwt_config()
    return jwt.encode(payload, secret, algorithm=algorithm)


def _claims_from_payload(payload: Dict[str, Any]) -> Optional[Claims]:
    sub = payload.get("sub")
    role = payload.get("role")
    if not isinstance(sub, str) or not sub.isdigit() or role not in ROLES:
        return None
    return Claims(user_id=int(sub), role=role)


def verify_token(token: str) -> TokenVerification:
    secret, algorithm = _jwt_config()
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except ExpiredSignatureError:
        return TokenVerification(TokenStatus.EXPIRED)
    except JWTError:
        return TokenVerification(TokenStatus.MALFORMED)

    claims = _claims_from_payload(payload)
    if claims is None:
        return TokenVerification(TokenStatus.UNKNOWN)
    return TokenVerification(TokenStatus.VALID, claims)


__all__ = [
    "Role",
    "ROLES",
    "TokenStatus",
    "Claims",
    "TokenVerification",
    "create_access_token",
    "verify_token",
]
