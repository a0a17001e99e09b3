"""Application settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings."""

    debug_mode: bool = False
    session_ttl_seconds: int = 86400  # 24 hours default
    session_repository: str = "in_memory"  # in_memory or postgres
    session_cache_enabled: bool = False  # Redis cache-aside in front of postgres sessions
    transfer_repository: str = "in_memory"  # in_memory or postgres
    database_url: str = ""  # Required when session_repository or transfer_repository is postgres
    redis_url: str = "redis://localhost:6379/0"
    catalog_csv_path: str = ""  # Empty means data/catalog.csv in the project root
    catalog_seed_on_startup: bool = True
    default_region: str = "Madrid"
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_whatsapp_number: str = ""
    twilio_validate_signature: bool = False
    twilio_send_via_api: bool = False  # Deliver replies via Messages API instead of TwiML
    twilio_api_base_url: str = "https://api.twilio.com/2010-04-01"
    twilio_timeout_seconds: float = 15.0
    twilio_idempotency_enabled: bool = True  # Skip Twilio retries of an already handled MessageSid
    twilio_idempotency_ttl_seconds: int = 3600
    idempotency_store: str = "in_memory"  # in_memory or redis

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",
    )


settings = Settings()
