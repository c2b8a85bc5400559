from __future__ import annotations

import hashlib
import hmac

from passlib.hash import argon2

from app.core.settings import get_settings

# Argon2id; parameters follow the OWASP baseline
_argon = argon2.using(type="ID", time_cost=3, memory_cost=65536, parallelism=2)


def _with_pepper(password: str) -> str:
    """Fold the server-side pepper (PASSWORD_PEPPER) into the password before hashing."""
    pepper = get_settings().password_pepper
    if not pepper:
        return password
    return hmac.new(pepper.encode("utf-8"), password.encode("utf-8"), hashlib.sha256).hexdigest()


def hash_password(password: str) -> str:
    return _argon.hash(_with_pepper(password))


def verify_password(password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    try:
        return _argon.verify(_with_pepper(password), password_hash)
    except ValueError:
        # not an argon2 hash at all
        return False


__all__ = ["hash_password", "verify_password"]
