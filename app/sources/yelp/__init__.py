"""
Yelp Fusion adapter.

Nearby business amenities (restaurants, grocery, gyms, coffee, banks,
pharmacy) with counts and the nearest picks per category.

Official API: https://docs.developer.yelp.com/docs/fusion-intro
API Key: Required (YELP_API_KEY, free tier: 500 calls/day)
"""

from app.sources.yelp.client import YelpClient
from app.sources.yelp import metadata

__all__ = ["YelpClient", "metadata"]
