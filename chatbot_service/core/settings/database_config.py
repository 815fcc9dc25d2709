"""Database connection configuration."""

from pydantic import BaseModel, SecretStr


class DatabaseConfig(BaseModel, frozen=True):
    """Database connection settings."""

    url: SecretStr | None
    host: str
    port: int
    user: str
    password: SecretStr
    name: str

    @property
    def async_url(self) -> str:
        """Async DB URL, explicit override first, then built from parts."""
        if self.url is not None and self.url.get_secret_value():
            return self.url.get_secret_value()
        return (
            f"postgresql+asyncpg://{self.user}:{self.password.get_secret_value()}"
            f"@{self.host}:{self.port}/{self.name}"
        )
