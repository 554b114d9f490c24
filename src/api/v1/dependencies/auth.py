"""
Authentication dependencies.

Guards the admin endpoints with an API key header.
"""

from fastapi import Request, Security, HTTPException, status
from fastapi.security import APIKeyHeader
from typing import Optional

from src.api.config import get_api_settings
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)

# Define API key header security scheme
api_key_header = APIKeyHeader(name=get_api_settings().API_KEY_HEADER, auto_error=False)


async def verify_api_key(request: Request, api_key: Optional[str] = Security(api_key_header)) -> str:
    """
    Verify API key authentication.

    Args:
        request: Current request (its app carries the API settings)
        api_key: API key from header

    Returns:
        Validated API key

    Raises:
        HTTPException: If API key is invalid or missing
    """
    settings = request.app.state.api_settings

    # Skip authentication if disabled
    if not settings.ENABLE_AUTH:
        return "auth_disabled"

    if not api_key:
        logger.warning("Admin request without API key")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key is required",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    if api_key not in settings.API_KEYS:
        logger.warning(f"Invalid API key attempt: {api_key[:4]}...")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key",
        )

    return api_key
