# backend/app/routers/auth.py
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.rate_limit import limiter
from app.core.settings import get_settings
from app.crud import apply_changes, remove, save
from app.db import get_db
from app.db_models import User as DBUser
from app.errors import Conflict, InvalidInput
from app.models import AuthResponse, LoginPayload, ProfileUpdate, RegisterPayload, UserOut
from app.security import CurrentUser, get_current_user
from app.security.logger import auth_logger as logger
from app.security.passwords import hash_password, verify_password
from app.security.tokens import Role, create_access_token

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _client_ip(request: Request) -> str:
    client = request.client
    return client.host if client and client.host else "0.0.0.0"


def _find_by_nisn_nip(db: Session, nisn_nip: str) -> Optional[DBUser]:
    return db.execute(select(DBUser).where(DBUser.nisn_nip == nisn_nip)).scalars().first()


def _create_user(db: Session, payload: RegisterPayload, role: Role) -> DBUser:
    if _find_by_nisn_nip(db, payload.nisn_nip) is not None:
        raise Conflict("nisn_nip already registered")

    user = DBUser(
        nisn_nip=payload.nisn_nip,
        nama=payload.nama,
        email=str(payload.email) if payload.email else None,
        password_hash=hash_password(payload.password),
        role=role,
        kelas=payload.kelas,
        jurusan=payload.jurusan,
    )
    # the unique index still catches a concurrent registration of the same number
    save(db, user, conflict_message="nisn_nip already registered")
    return user


def _issue(user: DBUser) -> AuthResponse:
    token = create_access_token(user.id, user.role)
    return AuthResponse(access_token=token, user=UserOut.model_validate(user))


# ---------------- Register ----------------
@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterPayload, request: Request, db: Session = Depends(get_db)) -> AuthResponse:
    # role is always assigned server-side; public registrations are voters
    user = _create_user(db, payload, role="voter")
    logger.info(f"Registered voter {user.nisn_nip} (id={user.id}) from IP {_client_ip(request)}")
    return _issue(user)


@router.post("/create-admin", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def create_admin(
    payload: RegisterPayload,
    request: Request,
    x_admin_secret: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
) -> AuthResponse:
    expected = get_settings().admin_secret
    if not expected or x_admin_secret != expected:
        logger.warning(f"Rejected admin creation for {payload.nisn_nip} from IP {_client_ip(request)}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="forbidden")

    user = _create_user(db, payload, role="admin")
    logger.info(f"Created admin {user.nisn_nip} (id={user.id}) from IP {_client_ip(request)}")
    return _issue(user)


# ---------------- Login ----------------
@router.post("/login", response_model=AuthResponse)
@limiter.limit(lambda: get_settings().login_rate_limit)
def login(request: Request, payload: LoginPayload, db: Session = Depends(get_db)) -> AuthResponse:
    ip = _client_ip(request)
    logger.info(f"Login attempt for {payload.nisn_nip} from IP {ip} Password:[REDACTED]")

    user = _find_by_nisn_nip(db, payload.nisn_nip)
    if user is None or not verify_password(payload.password, user.password_hash):
        logger.warning(f"Failed login for {payload.nisn_nip} from IP {ip}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_credentials")

    logger.info(f"Successful login for {payload.nisn_nip} from IP {ip}")
    return _issue(user)


# ---------------- Profile ----------------
def _current_account(current: CurrentUser, db: Session) -> DBUser:
    user = db.get(DBUser, current.id)
    if user is None:
        # token outlived its account
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="token_invalid")
    return user


@router.get("/me", response_model=UserOut)
def me(current: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)) -> UserOut:
    return UserOut.model_validate(_current_account(current, db))


@router.patch("/me", response_model=UserOut)
def update_me(
    payload: ProfileUpdate,
    current: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserOut:
    user = _current_account(current, db)
    changes = payload.model_dump(exclude_unset=True)
    if "nama" in changes and changes["nama"] is None:
        raise InvalidInput("nama cannot be null")
    if changes.get("email") is not None:
        changes["email"] = str(changes["email"])
    apply_changes(user, changes)
    save(db, user)
    logger.info(f"Profile updated for {user.nisn_nip} (id={user.id}) fields={sorted(changes)}")
    return UserOut.model_validate(user)


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
def delete_me(current: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)) -> Response:
    user = _current_account(current, db)
    nisn_nip = user.nisn_nip
    # votes, ballots and eskul choices go with the account (ON DELETE CASCADE)
    remove(db, user)
    logger.info(f"Account deleted {nisn_nip} (id={current.id})")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
