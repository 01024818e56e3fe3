"""Routers package."""

from . import (
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
