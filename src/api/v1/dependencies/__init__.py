"""
API v1 dependencies.
"""

from src.api.v1.dependencies.auth import verify_api_key
from src.api.v1.dependencies.rate_limit import RateLimiter, check_rate_limit
from src.api.v1.dependencies.services import get_orchestrator, get_form_schema

__all__ = [
    "verify_api_key",
    "RateLimiter",
    "check_rate_limit",
    "get_orchestrator",
    "get_form_schema",
]
