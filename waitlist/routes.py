# API route definitions (HTTP layer)
# Defines ENDPOINTS

from fastapi import APIRouter, Depends, HTTPException, Request
from slowapi import Limiter

from .config import Settings
from .db import Database
from .dependencies import get_database, require_admin
from .schemas import ErrorResponse, MessageResponse, UserOut, UserPost
from . import services


def create_router(settings: Settings, limiter: Limiter) -> APIRouter:
    """Build the API router with rate limits taken from *settings*."""
    router = APIRouter()

    @router.get("/")
    def root():
        return {"app": settings.APP_NAME, "env": settings.APP_ENV}

    @router.get("/ping", response_model=MessageResponse)
    def ping():
        return {"message": "pong"}

    @router.get("/health")
    async def health_check(database: Database = Depends(get_database)):
        """Health check endpoint for load balancers and monitoring.

        Returns:
            - 200 OK if the service and database are healthy
            - 503 Service Unavailable if the database is unreachable
        """
        health_status = {
            "status": "healthy",
            "service": settings.APP_NAME,
            "environment": settings.APP_ENV,
        }

        if not await database.check_connection():
            health_status["status"] = "unhealthy"
            health_status["database"] = "disconnected"
            raise HTTPException(status_code=503, detail=health_status)

        health_status["database"] = "connected"
        return health_status

    # ============================================================================
    # Waitlist Endpoints
    # ============================================================================

    @router.post(
        "/users",
        response_model=MessageResponse,
        responses={400: {"model": ErrorResponse}, 429: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    @limiter.limit(settings.RATE_LIMIT_SIGNUP)
    async def create_user(
        payload: UserPost,
        request: Request,
        database: Database = Depends(get_database),
    ):
        """Add an email to the waitlist.

        Raises:
            400: Email failed validation or body is not valid JSON
            429: Rate limit exceeded
            500: Email already on the waitlist or storage failure
        """
        await services.create_signup(database, payload.email)
        return {"message": "user created"}

    @router.get(
        "/users",
        response_model=list[UserOut],
        responses={401: {"model": ErrorResponse}},
        dependencies=[Depends(require_admin)],
    )
    async def list_users(database: Database = Depends(get_database)):
        """List every signup. Requires the admin bearer token."""
        return await services.list_signups(database)

    return router
