"""Bearer token verification against the Supabase auth API."""

import logging
from typing import Optional

import httpx

from connector_hub.infra.config import config
from connector_hub.services.ports import AuthenticatedUser

logger = logging.getLogger(__name__)


class SupabaseIdentityProvider:
    """Resolves access tokens to users via ``GET {SUPABASE_URL}/auth/v1/user``."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
    ):
        self.base_url = (base_url or config.SUPABASE_URL or "").rstrip("/")
        self.api_key = api_key or config.SUPABASE_SERVICE_ROLE_KEY
        self.timeout = timeout

    async def get_user(self, access_token: str) -> Optional[AuthenticatedUser]:
        if not self.base_url:
            raise RuntimeError("SUPABASE_URL not configured")

        headers = {"Authorization": f"Bearer {access_token}"}
        if self.api_key:
            headers["apikey"] = self.api_key

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.get(f"{self.base_url}/auth/v1/user", headers=headers)
            except httpx.HTTPError as e:
                # SECURITY: Never log the token itself
                logger.warning(f"Identity provider request failed: {str(e)}")
                return None

        if response.status_code != 200:
            return None

        data = response.json()
        user_id = data.get("id")
        if not user_id:
            return None

        return AuthenticatedUser(
            id=user_id,
            email=data.get("email"),
            metadata=data.get("user_metadata") or {},
        )


identity_provider = SupabaseIdentityProvider()
