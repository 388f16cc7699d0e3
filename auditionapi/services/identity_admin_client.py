import logging

import httpx

from auditionapi.config import Settings
from auditionapi.core.exceptions import InternalServerError, ServiceUnavailableError

logger = logging.getLogger(__name__)


class IdentityAdminClient:
    """Supabase Auth (GoTrue) admin API, used with the service-role key"""

    def __init__(self, settings: Settings):
        self.settings = settings

    def _admin_url(self, user_id: str) -> str:
        if not self.settings.SUPABASE_URL or not self.settings.SUPABASE_SERVICE_ROLE_KEY:
            raise ServiceUnavailableError("Identity provider admin API is not configured")
        return f"{self.settings.SUPABASE_URL.rstrip('/')}/auth/v1/admin/users/{user_id}"

    async def update_password(self, user_id: str, password: str) -> None:
        url = self._admin_url(user_id)
        key = self.settings.SUPABASE_SERVICE_ROLE_KEY
        headers = {"apikey": key, "Authorization": f"Bearer {key}"}
        try:
            async with httpx.AsyncClient(timeout=30.0) as client:
                response = await client.put(url, json={"password": password}, headers=headers)
        except httpx.TimeoutException:
            logger.error(f"Identity admin timeout updating password for {user_id}")
            raise ServiceUnavailableError("Identity provider timeout")
        except httpx.HTTPError as e:
            logger.error(f"Identity admin request failed for {user_id}: {e}")
            raise ServiceUnavailableError("Identity provider unreachable")

        if response.status_code != 200:
            logger.error(f"Password update rejected for {user_id}: {response.text}")
            raise InternalServerError("Failed to update password")
