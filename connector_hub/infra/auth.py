"""API authentication."""

import logging
from typing import Optional
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from connector_hub.infra.errors import Unauthorized
from connector_hub.services.ports import AuthenticatedUser, IdentityProvider

logger = logging.getLogger(__name__)

# Bearer token issued by the identity provider
bearer_scheme = HTTPBearer(auto_error=False, description="Access token issued by the identity provider")


async def authenticate(
    credentials: Optional[HTTPAuthorizationCredentials],
    provider: IdentityProvider,
) -> AuthenticatedUser:
    """
    Verify a bearer token and return the user it belongs to.

    Args:
        credentials: Parsed Authorization header, if any
        provider: Identity provider used to verify the token

    Returns:
        The authenticated user

    Raises:
        Unauthorized: If the header is missing or the token is rejected
    """
    if credentials is None or not credentials.credentials:
        raise Unauthorized("No authorization header")

    user = await provider.get_user(credentials.credentials)
    if user is None:
        # SECURITY: Never log the token itself
        logger.info("Rejected bearer token")
        raise Unauthorized("Unauthorized")

    return user
