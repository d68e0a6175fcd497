import logging
import time
import uuid
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, HTTPException, Response, status

from app.configs.config import get_settings
from app.schemas.auth import (
    AuthSessionResponse,
    SignInRequest,
    SignUpRequest,
    SignUpResponse,
)
from app.services.auth_service import SessionService, get_session_service
from app.services.auth_session_store import AuthSessionStore, get_auth_session_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])
settings = get_settings()

AUTH_COOKIE_NAME = "auth_session"
# Refresh access tokens this many seconds before they expire.
REFRESH_MARGIN_SECONDS = 60


def _set_auth_cookie(response: Response, session_id: str, store: AuthSessionStore) -> None:
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=session_id,
        max_age=store.cookie_max_age,
        httponly=True,
        secure=settings.SECURE_COOKIE,
        samesite=settings.SAMESITE,
    )


@router.post("/signup", response_model=SignUpResponse, status_code=status.HTTP_201_CREATED)
async def sign_up(
    body: SignUpRequest,
    session_service: SessionService = Depends(get_session_service),
):
    user = await session_service.sign_up(body.email, body.password, body.full_name)
    return {"message": "Check your email for the confirmation link!", "user": user}


@router.post("/login", response_model=AuthSessionResponse)
async def login(
    body: SignInRequest,
    response: Response,
    session_service: SessionService = Depends(get_session_service),
    default_store: AuthSessionStore = Depends(get_auth_session_store),
):
    """
    Password login. The remember-me choice decides whether the session
    survives a browser restart.
    """
    remember_me = (
        body.remember_me if body.remember_me is not None else settings.REMEMBER_ME_DEFAULT
    )
    store = AuthSessionStore(remember_me=remember_me, redis_client=default_store.redis_client)

    session = await session_service.sign_in(body.email, body.password)

    session_id = str(uuid.uuid4())
    store.save(session_id, session)
    _set_auth_cookie(response, session_id, store)
    logger.info(f"User signed in (remember_me={remember_me})")
    return {"authenticated": True, "user": session["user"]}


@router.post("/logout")
async def logout(
    response: Response,
    auth_session: Optional[str] = Cookie(None),
    session_service: SessionService = Depends(get_session_service),
    store: AuthSessionStore = Depends(get_auth_session_store),
):
    record = store.load(auth_session) if auth_session else None
    await session_service.sign_out(record.get("access_token") if record else None)
    if auth_session:
        store.remove(auth_session)
    response.delete_cookie(AUTH_COOKIE_NAME)
    return {"message": "Signed out"}


@router.get("/session", response_model=AuthSessionResponse)
async def get_session(
    response: Response,
    auth_session: Optional[str] = Cookie(None),
    session_service: SessionService = Depends(get_session_service),
    store: AuthSessionStore = Depends(get_auth_session_store),
):
    """
    Return the signed-in user, refreshing the access token when it is about
    to expire. Sessions that cannot be refreshed are dropped.
    """
    if not auth_session:
        return {"authenticated": False, "user": None}

    record = store.load(auth_session)
    if not record:
        response.delete_cookie(AUTH_COOKIE_NAME)
        return {"authenticated": False, "user": None}

    expires_at = record.get("expires_at")
    if expires_at is not None and expires_at - REFRESH_MARGIN_SECONDS <= time.time():
        refresh_token = record.get("refresh_token")
        try:
            if not refresh_token:
                raise HTTPException(status_code=401, detail="Session expired")
            refreshed = await session_service.refresh(refresh_token)
        except HTTPException as e:
            if e.status_code >= 500:
                raise
            logger.info(f"Dropping auth session that could not be refreshed: {e.detail}")
            store.remove(auth_session)
            response.delete_cookie(AUTH_COOKIE_NAME)
            return {"authenticated": False, "user": None}

        keeper = AuthSessionStore(
            remember_me=bool(record.get("remember_me")),
            redis_client=store.redis_client,
        )
        keeper.save(auth_session, refreshed)
        record = refreshed

    return {"authenticated": True, "user": record.get("user")}
