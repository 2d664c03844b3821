"""Domain services."""

from .base import Service
from .broadcaster import ALL_PRODUCTS, Broadcaster
from .jwt_service import JWTService
from .rate_limiter import RateLimiter
from .reconciliation_service import ReconciliationService
from .vote_service import VoteService

__all__ = [
    "ALL_PRODUCTS",
    "Broadcaster",
    "JWTService",
    "RateLimiter",
    "ReconciliationService",
    "Service",
    "VoteService",
]
