from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

AMADEUS_HOSTS = {
    "test": "https://test.api.amadeus.com",
    "production": "https://api.amadeus.com",
}

class Settings(BaseSettings):
    # App Settings
    app_name: str = "fareview"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000
    
    # Third Party: Amadeus
    amadeus_client_id: str
    amadeus_client_secret: str
    amadeus_env: str = "test"  # "test" or "production", also selects the rate limit profile
    amadeus_base_url: Optional[str] = None
    amadeus_timeout: float = 15.0
    
    # CORS
    cors_origins: str = ""  # Comma-separated allow-list, empty allows any origin

    # Built frontend, served from / when present
    static_dir: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @field_validator("amadeus_client_id", "amadeus_client_secret")
    @classmethod
    def _credentials_non_empty(cls, v: str, info) -> str:
        if not v or not v.strip():
            raise ValueError(f"{info.field_name.upper()} environment variable could not be read")
        return v.strip()

    @field_validator("amadeus_env")
    @classmethod
    def _normalize_env(cls, v: str) -> str:
        return (v or "test").strip().lower()

    @property
    def amadeus_host(self) -> str:
        if self.amadeus_base_url:
            return self.amadeus_base_url.rstrip("/")
        return AMADEUS_HOSTS.get(self.amadeus_env, AMADEUS_HOSTS["production"])

    @property
    def allowed_origins(self) -> list:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

settings = Settings()
