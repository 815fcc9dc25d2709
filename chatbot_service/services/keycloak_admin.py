"""Keycloak admin API client for realm role assignment."""

import httpx
import structlog

from chatbot_service.core.settings import KeycloakConfig

logger = structlog.get_logger()

ADMIN_CLIENT_ID = "admin-cli"
REQUEST_TIMEOUT_SECONDS = 10.0


class KeycloakAdminClient:
    """Assigns realm roles through the Keycloak admin REST API.

    Failures never raise: callers treat role assignment as best effort.
    """

    def __init__(
        self,
        config: KeycloakConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._config.url.rstrip("/")

    async def assign_realm_role(self, user_id: str, role_name: str) -> bool:
        """Add ``role_name`` to the user's realm role mappings.

        Returns:
            True when Keycloak accepted the mapping, False otherwise.
        """
        if not self._config.has_admin_credentials:
            logger.warning(
                "Keycloak admin credentials not configured, skipping role assignment",
                user_id=user_id,
                role=role_name,
            )
            return False

        realm = self._config.realm
        try:
            async with httpx.AsyncClient(
                timeout=REQUEST_TIMEOUT_SECONDS, transport=self._transport
            ) as client:
                token = await self._get_admin_token(client)
                headers = {"Authorization": f"Bearer {token}"}

                role_resp = await client.get(
                    f"{self.base_url}/admin/realms/{realm}/roles/{role_name}",
                    headers=headers,
                )
                role_resp.raise_for_status()
                role = role_resp.json()

                assign_resp = await client.post(
                    f"{self.base_url}/admin/realms/{realm}"
                    f"/users/{user_id}/role-mappings/realm",
                    headers=headers,
                    json=[role],
                )
                assign_resp.raise_for_status()
        except (httpx.HTTPError, KeyError, ValueError) as exc:
            logger.warning(
                "Failed to assign Keycloak realm role",
                user_id=user_id,
                role=role_name,
                error=str(exc),
            )
            return False

        logger.info("Assigned Keycloak realm role", user_id=user_id, role=role_name)
        return True

    async def _get_admin_token(self, client: httpx.AsyncClient) -> str:
        response = await client.post(
            f"{self.base_url}/realms/master/protocol/openid-connect/token",
            data={
                "grant_type": "password",
                "client_id": ADMIN_CLIENT_ID,
                "username": self._config.admin_user,
                "password": self._config.admin_password.get_secret_value(),
            },
        )
        response.raise_for_status()
        return response.json()["access_token"]
