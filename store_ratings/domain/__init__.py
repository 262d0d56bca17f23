from store_ratings.domain.models import Actor, DashboardStats, RatingEntry

__all__ = ["Actor", "DashboardStats", "RatingEntry"]
