from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Upstream tutoring API (session records, invoice PDFs)
    api_base_url: str = "http://localhost:8080/api"
    request_timeout_seconds: float = 30.0

    # App
    app_env: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Invoices. Filenames look like Bao-Gia-2024-03.pdf
    invoice_filename_prefix: str = "Bao-Gia"

    # Money. VND has no minor unit.
    currency_code: str = "VND"
    currency_decimals: int = 0

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @field_validator("api_base_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v):
        """Paths are joined as base + '/sessions/...', so drop a trailing slash."""
        if not v:
            raise ValueError("API_BASE_URL is required")
        if isinstance(v, str):
            return v.rstrip("/")
        return v

    @field_validator("currency_decimals")
    @classmethod
    def check_decimals(cls, v: int) -> int:
        if v < 0:
            raise ValueError("currency_decimals must be >= 0")
        return v


settings = Settings()
