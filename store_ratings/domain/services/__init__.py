"""Domain services."""

from store_ratings.domain.services.aggregation import AggregationEngine, average_rating
from store_ratings.domain.services.ratings import RatingService
from store_ratings.domain.services.roles import ProfileInput, RoleService
from store_ratings.domain.services.stores import StoreService
from store_ratings.domain.services.users import UserService

__all__ = [
    "AggregationEngine",
    "ProfileInput",
    "RatingService",
    "RoleService",
    "StoreService",
    "UserService",
    "average_rating",
]
