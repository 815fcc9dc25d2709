"""Keycloak admin configuration."""

from pydantic import BaseModel, SecretStr


class KeycloakConfig(BaseModel, frozen=True):
    """Keycloak admin API settings used for realm role assignment."""

    url: str
    realm: str
    admin_user: str
    admin_password: SecretStr

    @property
    def has_admin_credentials(self) -> bool:
        """Check whether admin credentials are present."""
        return bool(self.admin_user and self.admin_password.get_secret_value())
