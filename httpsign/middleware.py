"""
Signature verification middleware for Starlette/FastAPI applications.

Usage:
    from httpsign import new_authenticator
    from httpsign.middleware import HTTPSignMiddleware

    app.add_middleware(
        HTTPSignMiddleware,
        authenticator=new_authenticator("abc:s3cr3t"),
        public_paths={"/health"},
    )
"""

from typing import Dict, Optional, Set

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from .authenticator import Authenticator
from .constants import AUTHORIZATION_SCHEME
from .exceptions import AuthenticationError


def _request_target(request: Request) -> str:
    # raw_path keeps the percent-encoding the client signed
    raw_path = request.scope.get("raw_path")
    path = raw_path.split(b"?", 1)[0].decode("latin-1") if raw_path else request.url.path
    query = request.scope.get("query_string", b"")
    if query:
        path = f"{path}?{query.decode('latin-1')}"
    return path


def _request_headers(request: Request) -> Dict[str, str]:
    return {name: ", ".join(request.headers.getlist(name)) for name in request.headers.keys()}


class HTTPSignMiddleware(BaseHTTPMiddleware):
    """
    Rejects requests that do not carry a valid signature.

    Every rejection gets the same 401 answer; the specific reason is only
    logged. The authenticated key id is stored on ``request.state.key_id``.
    """

    def __init__(self, app, authenticator: Authenticator, public_paths: Optional[Set[str]] = None):
        super().__init__(app)
        self.authenticator = authenticator
        self.public_paths = set(public_paths or ())

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self.public_paths:
            return await call_next(request)

        body = await request.body()
        client = request.client.host if request.client else None
        try:
            # The authenticator logs the rejection reason
            with structlog.contextvars.bound_contextvars(client=client):
                key_id = self.authenticator.verify(
                    request.method,
                    _request_target(request),
                    _request_headers(request),
                    body,
                )
        except AuthenticationError:
            return JSONResponse(
                {"error": "unauthorized"},
                status_code=401,
                headers={"WWW-Authenticate": AUTHORIZATION_SCHEME},
            )

        request.state.key_id = key_id
        return await call_next(request)
