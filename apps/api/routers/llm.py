"""LLM model catalogue router."""

from fastapi import APIRouter

from config import llm_provider, settings
from services.llm_client import SUPPORTED_MODELS

router = APIRouter()


@router.get("/models")
async def list_models():
    """Models selectable for analysis/generation, plus the configured default."""
    return {
        "provider": llm_provider(),
        "default": settings.LLM_MODEL,
        "models": SUPPORTED_MODELS,
    }
