"""Persisted shopper feedback.

Components:
- FeedbackRecord: Dataclass mapping to the feedback table
- FeedbackFilter / FeedbackPage / ShopFeedItem: Listing types
- FeedbackRepository: Insert, lookup and paginated listing
- FeedbackConfig: Pydantic settings for page sizes
"""

from feedbacker.feedback.config import FeedbackConfig
from feedbacker.feedback.repository import FeedbackRepository, is_valid_id
from feedbacker.feedback.schemas import (
    FeedbackFilter,
    FeedbackPage,
    FeedbackRecord,
    ShopFeedItem,
)

__all__ = [
    "FeedbackConfig",
    "FeedbackFilter",
    "FeedbackPage",
    "FeedbackRecord",
    "FeedbackRepository",
    "ShopFeedItem",
    "is_valid_id",
]
