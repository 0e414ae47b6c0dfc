"""FastAPI middleware that assigns each browser a lookup session ID."""

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Optional
import uuid

SESSION_COOKIE_NAME = "weatherlookup_session_id"
SESSION_HEADER_NAME = "X-Session-ID"
SESSION_MAX_AGE_SECONDS = 3600 * 24


class SessionMiddleware(BaseHTTPMiddleware):
    """Attaches ``request.state.session_id`` and persists new IDs in a cookie."""

    def __init__(self, app, session_cookie_name: str = SESSION_COOKIE_NAME):
        super().__init__(app)
        self.session_cookie_name = session_cookie_name

    async def dispatch(self, request: Request, call_next):
        session_id = self._get_session_id(request)
        is_new = session_id is None
        if is_new:
            session_id = str(uuid.uuid4())

        request.state.session_id = session_id
        response = await call_next(request)

        if is_new and response.status_code < 400:
            response.set_cookie(
                key=self.session_cookie_name,
                value=session_id,
                max_age=SESSION_MAX_AGE_SECONDS,
                httponly=True,
                samesite="lax",
            )
            response.headers[SESSION_HEADER_NAME] = session_id

        return response

    def _get_session_id(self, request: Request) -> Optional[str]:
        """Cookie first, then the header used by non-browser clients"""
        return request.cookies.get(self.session_cookie_name) or request.headers.get(
            SESSION_HEADER_NAME
        )
