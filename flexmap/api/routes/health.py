"""Health Probe — liveness endpoint for container orchestration.

Invariants:
    - GET {prefix}/health/ always returns 200 if the process is up
"""

from fastapi import APIRouter, status

from flexmap import __version__


def build_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=f"{prefix}/health", tags=["health"])

    @router.get("/", status_code=status.HTTP_200_OK)
    async def health_check():
        """Basic liveness probe. Returns 200 if the process is up."""
        return {
            "status": "healthy",
            "service": "flexmap",
            "version": __version__,
        }

    return router
