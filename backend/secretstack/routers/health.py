"""
Health check router for liveness and readiness probes.
"""
import logging

from fastapi import APIRouter, status

from secretstack.dependencies.auth import Context

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
)
async def health_check():
    """
    Basic health check endpoint.
    Returns 200 if the app is running.
    """
    return {"status": "healthy"}


@router.get(
    "/health/ready",
    status_code=status.HTTP_200_OK,
    summary="Readiness check with dependencies",
)
async def readiness_check(ctx: Context):
    """
    Readiness check that verifies database connections.
    Reports "degraded" if MongoDB or Redis is unreachable.
    """
    checks = {
        "api": "healthy",
        "mongodb": "unknown",
        "redis": "unknown",
    }

    # Check MongoDB
    try:
        await ctx.users.ping()
        checks["mongodb"] = "healthy"
    except Exception as e:
        logger.warning("MongoDB readiness check failed: %s", e)
        checks["mongodb"] = "unhealthy"

    # Check Redis
    try:
        await ctx.redis.ping()
        checks["redis"] = "healthy"
    except Exception as e:
        logger.warning("Redis readiness check failed: %s", e)
        checks["redis"] = "unhealthy"

    all_healthy = all(v == "healthy" for v in checks.values())

    return {
        "status": "healthy" if all_healthy else "degraded",
        "checks": checks,
    }
