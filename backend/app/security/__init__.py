from typing import Optional

from fastapi import Depends, HTTPException, Request, status

from app.security.tokens import Role, TokenStatus, verify_token


class CurrentUser:
    def __init__(self, id: int, role: Role):
        self.id = id
        self.role = role


def _bearer_token(request: Request) -> Optional[str]:
    auth = request.headers.get("authorization", "")
    parts = auth.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def get_current_user(request: Request) -> CurrentUser:
    token = _bearer_token(request)
    if token is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="unauthenticated")

    result = verify_token(token)
    if result.status is TokenStatus.VALID and result.claims is not None:
        return CurrentUser(id=result.claims.user_id, role=result.claims.role)
    if result.status is TokenStatus.EXPIRED:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="token_expired")
    # MALFORMED and UNKNOWN are both plain rejections
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="token_invalid")


def require_role(*needed: Role):
    def _dep(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in needed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="forbidden")
        return user

    return _dep


__all__ = ["CurrentUser", "get_current_user", "require_role"]
