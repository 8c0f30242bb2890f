"""
Walk Score adapter.

Walkability, transit and bike scores for a point.

API Documentation: https://www.walkscore.com/professional/api.php
API Key: Required (WALKSCORE_API_KEY)
"""

from app.sources.walkscore.client import WalkScoreClient
from app.sources.walkscore import metadata

__all__ = ["WalkScoreClient", "metadata"]
