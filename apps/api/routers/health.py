"""
Health check endpoints.
"""

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
import redis.asyncio as redis

from config import environment_checks, llm_provider, settings
from database import engine
from services.llm_client import check_llm_health

router = APIRouter()


def _environment_ok(checks: dict) -> bool:
    key_name = "openrouter_api_key" if llm_provider() == "openrouter" else "openai_api_key"
    return checks["database_url"] and checks["youtube_api_key"] and checks[key_name]


@router.get("/health")
async def health_check():
    """
    Health check endpoint.
    Returns database, LLM, Redis and credential status; 503 when the database is unreachable.
    """
    timestamp = datetime.now(timezone.utc).isoformat()

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "database": "error",
                "llm": "unchecked",
                "message": "Database connection failed",
                "details": str(e),
                "timestamp": timestamp,
            },
        )

    llm_healthy = await check_llm_health()

    redis_status = "up"
    try:
        r = redis.from_url(settings.REDIS_URL)
        await r.ping()
        await r.aclose()
    except Exception as e:
        redis_status = f"down: {str(e)}"

    env = environment_checks()
    env_ok = _environment_ok(env)

    return {
        "status": "healthy" if llm_healthy and env_ok else "unhealthy",
        "database": "healthy",
        "llm": "healthy" if llm_healthy else "error",
        "redis": redis_status,
        "environment": "healthy" if env_ok else "error",
        "checks": {
            "database": "connected",
            "llm": "responsive" if llm_healthy else "unresponsive",
            "environment": env,
        },
        "timestamp": timestamp,
    }


@router.get("/health/ready")
async def readiness_check():
    """Kubernetes-style readiness probe."""
    missing = [name.upper() for name, ok in environment_checks().items() if not ok]
    if not _environment_ok(environment_checks()):
        return JSONResponse(
            status_code=503,
            content={"ready": False, "missing": missing},
        )
    return {"ready": True}


@router.get("/health/live")
async def liveness_check():
    """Kubernetes-style liveness probe."""
    return {"alive": True}
