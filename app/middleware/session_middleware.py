import logging
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
from app.configs.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()
UPLOAD_SESSION_COOKIE_NAME = "upload_session_id"


class UploadSessionMiddleware(BaseHTTPMiddleware):
    """
    Ensure every request carries an upload-session id.

    The id is read from the cookie, or minted and set on the response when the
    browser does not have one yet.
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next):
        session_id = request.cookies.get(UPLOAD_SESSION_COOKIE_NAME)
        minted = not session_id
        if minted:
            session_id = str(uuid.uuid4())
            logger.debug(f"Minted upload session id: {session_id}")

        request.state.upload_session_id = session_id
        response = await call_next(request)

        if minted:
            response.set_cookie(
                key=UPLOAD_SESSION_COOKIE_NAME,
                value=session_id,
                max_age=settings.UPLOAD_SESSION_TTL_SECONDS,
                httponly=True,
                secure=settings.SECURE_COOKIE,
                samesite=settings.SAMESITE,
            )
        return response
