"""
AI Content Agent - FastAPI Backend
Main application entry point with health check and API routing.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import require_llm_api_key, settings
from database import engine, Base
import models  # noqa: F401
from routers import (
    health,
    references,
    analyze,
    discover,
    generate,
    offers,
    packs,
    tiktok,
    analytics,
    llm,
)
from services.generation import recover_stalled_generation_jobs


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup
    print(f"🚀 Starting {settings.APP_TITLE} API...")
    if settings.AUTO_CREATE_DB_SCHEMA:
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            print("🗄️ Database schema verified.")
        except Exception as e:
            print(f"⚠️ Database bootstrap skipped: {e}")
    try:
        recovered = await recover_stalled_generation_jobs(settings.STALLED_JOB_MAX_AGE_MINUTES)
        if recovered:
            print(f"♻️ Marked {recovered} stalled generation jobs as failed after startup.")
    except Exception as exc:
        print(f"⚠️ Stalled generation job recovery skipped: {exc}")
    try:
        require_llm_api_key()
    except ValueError as exc:
        print(f"⚠️ {exc}: analysis refinement and generation will fail until it is set.")
    yield
    # Shutdown
    await engine.dispose()
    print("👋 Shutting down API...")


app = FastAPI(
    title=f"{settings.APP_TITLE} API",
    description="Discover viral short-form content, analyze why it worked, and generate new content packs",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(references.router, prefix="/references", tags=["References"])
app.include_router(analyze.router, prefix="/analyze", tags=["Analysis"])
app.include_router(discover.router, prefix="/discover", tags=["Discovery"])
app.include_router(generate.router, prefix="/generate", tags=["Generation"])
app.include_router(offers.router, prefix="/offers", tags=["Offers"])
app.include_router(packs.router, prefix="/packs", tags=["Packs"])
app.include_router(tiktok.router, prefix="/tiktok", tags=["TikTok"])
app.include_router(analytics.router, prefix="/analytics", tags=["Analytics"])
app.include_router(llm.router, prefix="/llm", tags=["LLM"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": f"{settings.APP_TITLE} API",
        "version": "0.1.0",
        "status": "running"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.API_HOST, port=settings.API_PORT, reload=False)
