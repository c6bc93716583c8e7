"""Application settings loaded from the environment.

Uses pydantic-settings for validation; values may also come from a local .env file.
"""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings for the SQS/SNS connector (credentials, region, polling)."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = Field(default="SQS Message Bus")
    aws_access_key_id: str | None = Field(default=None)
    aws_secret_access_key: SecretStr | None = Field(default=None)
    aws_region: str | None = Field(default=None)
    aws_endpoint_url: str | None = Field(default=None)
    receive_check_interval_ms: int | None = Field(default=None, ge=1)
    receive_wait_seconds: int | None = Field(default=None, ge=0, le=20)

    def connector_kwargs(self) -> dict:
        """Keyword arguments for SQSConnector built from these settings."""
        secret = self.aws_secret_access_key
        return {
            "aws_access_key_id": self.aws_access_key_id,
            "aws_secret_access_key": secret.get_secret_value() if secret else None,
            "region_name": self.aws_region,
            "endpoint_url": self.aws_endpoint_url,
            "receive_check_interval_ms": self.receive_check_interval_ms,
            "receive_wait_seconds": self.receive_wait_seconds,
        }


def get_settings() -> Settings:
    """Return the loaded settings instance."""
    return Settings()
