# domainstore/app/api/endpoints/auth.py
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from domainstore.app.api import deps
from domainstore.app.core.config import Settings
from domainstore.app.core.exceptions import UnauthorizedError
from domainstore.app.crud import user as user_crud
from domainstore.app.db.session import get_db
from domainstore.app.models.user import User
from domainstore.app.schemas.user import (
    Credentials,
    LoginResponse,
    MeResponse,
    MeUser,
    RegisterResponse,
    TokenClaims,
)
from domainstore.app.security import hashing, jwt

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: Credentials,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(deps.get_settings),
):
    user = await user_crud.get_user_by_username(db, credentials.username)

    # bcrypt is CPU bound; keep it off the event loop
    if user is None:
        # unknown usernames cost the same as wrong passwords
        await run_in_threadpool(hashing.dummy_verify)
        password_ok = False
    else:
        password_ok = await run_in_threadpool(
            hashing.verify_password, credentials.password, user.password_hash
        )
    if not password_ok:
        logger.info("Failed login for %r", credentials.username)
        raise UnauthorizedError("Incorrect username or password.")

    if not user.is_active:
        logger.info("Login refused for inactive user %s", user.id)
        raise UnauthorizedError("User not active.")

    token = jwt.create_access_token(
        TokenClaims(id=user.id, username=user.username, is_admin=user.is_admin),
        settings,
    )
    logger.info("User %s logged in", user.id)
    return LoginResponse(message="Logged in successfully", token=token)


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(credentials: Credentials, db: AsyncSession = Depends(get_db)):
    """New accounts start inactive and without domains until an admin steps in."""
    password_hash = await run_in_threadpool(hashing.get_password_hash, credentials.password)
    new_user = await user_crud.create_user(
        db,
        username=credentials.username,
        password_hash=password_hash,
        is_active=False,
        is_admin=False,
        domains=None,
    )
    logger.info("Registered user %s (%r)", new_user.id, new_user.username)
    return RegisterResponse(message="User created", id=new_user.id)


@router.get("/users/me", response_model=MeResponse)
async def read_current_user(current_user: User = Depends(deps.get_current_user)):
    # isAdmin comes from the row, not from the token snapshot
    return MeResponse(
        is_logged_in=True,
        user=MeUser(
            id=current_user.id,
            username=current_user.username,
            is_admin=current_user.is_admin,
        ),
    )
