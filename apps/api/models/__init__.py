"""Models package."""

from .content_reference import ContentReference
from .analysis import Analysis
from .generation_job import GenerationJob
from .offer_profile import OfferProfile
from .pack import Pack
from .tiktok_watchlist import TikTokWatchlist, TikTokWatchItem
