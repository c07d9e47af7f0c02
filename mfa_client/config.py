# (c) Copyright Datacraft, 2026
import logging

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # Gateway connection
    gateway_url: str = "http://localhost:8000"
    gateway_token: str | None = None
    request_timeout: float | None = Field(
        default=None, description="Seconds; None waits for the gateway indefinitely"
    )

    # Code lengths are configured independently
    enrollment_code_length: int = Field(gt=0, default=6)
    phone_code_length: int = Field(gt=0, default=6)

    # In-process gateway settings
    issuer: str = Field(default="dArchiva", description="TOTP issuer name")
    account_label: str = Field(default="user@example.com", description="Label shown in authenticator apps")
    totp_valid_window: int = Field(ge=0, default=1)
    phone_code_ttl: int = Field(gt=0, default=300, description="Phone code lifetime in seconds")

    model_config = SettingsConfigDict(env_prefix='mfa_')


@lru_cache()
def get_settings():
    return Settings()
