"""External User service settings configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class UserServiceSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    USER_SERVICE_URL: str = "http://localhost:8081"
    # Seconds; applies to every single remote call
    USER_SERVICE_TIMEOUT: float = 10.0


__all__ = ["UserServiceSettings"]
