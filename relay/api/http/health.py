"""Health check endpoint for monitoring service status."""

from fastapi import APIRouter, Request, status
from pydantic import BaseModel

router = APIRouter()


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    active_connections: int


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check endpoint",
    tags=["health"],
)
async def health_check(request: Request) -> HealthResponse:
    """
    Report service status and the number of connected relay clients.

    The relay has no external dependencies, so a response at all means the
    process is serving.
    """
    return HealthResponse(
        status="healthy",
        active_connections=request.app.state.registry.size(),
    )
