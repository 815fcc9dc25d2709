"""Server configuration."""

from pydantic import BaseModel


class ServerConfig(BaseModel, frozen=True):
    """Server settings."""

    host: str
    port: int
    cors_origin: str
    rate_limit: str

    @property
    def cors_origins(self) -> list[str]:
        """Comma-separated ``cors_origin`` as a list, shared by HTTP and Socket.IO."""
        return [origin.strip() for origin in self.cors_origin.split(",") if origin.strip()]
