"""FastAPI dependencies for shared resources and admin authorization."""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from .auth import AdminTokenVerifier
from .db import Database
from .logger import logger


# ==================== Application State ====================

def get_database(request: Request) -> Database:
    return request.app.state.database


def get_admin_verifier(request: Request) -> AdminTokenVerifier:
    return request.app.state.admin_verifier


# ==================== Authentication Dependencies ====================

security = HTTPBearer(auto_error=False)


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=f"unauthorized: {message}",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def require_admin(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    verifier: AdminTokenVerifier = Depends(get_admin_verifier),
) -> None:
    """Allow the request only with a valid admin bearer token. Raises 401 otherwise."""
    if not request.headers.get("Authorization"):
        raise _unauthorized("missing authorization header")

    # HTTPBearer yields None for non-Bearer schemes
    if credentials is None or not verifier.verify(credentials.credentials):
        logger.warning(f"Rejected admin request on {request.url.path}: invalid token")
        raise _unauthorized("invalid token")
