from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings managed via Pydantic Settings.
    Reads variables from environment and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # --- Application Meta ---
    APP_NAME: str = "AI Data Cleaner"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    # --- Remote Cleaning Service (Groq) ---
    # Optional so the API can start without a key; cleaning endpoints report it missing
    GROQ_API_KEY: Optional[str] = Field(None, description="API Key for Groq Cloud")

    DEFAULT_MODEL: str = "openai/gpt-oss-120b"
    TEMPERATURE: float = 0.1
    MAX_TOKENS: int = 8192

    # --- Server Configuration ---
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # --- Data Ingestion Limits ---
    MAX_UPLOAD_SIZE_MB: int = 10
    URL_FETCH_TIMEOUT: float = 15.0

    # --- Schema / EDA ---
    # Type classification only looks at this many leading rows
    SCHEMA_SAMPLE_SIZE: int = Field(100, ge=1)
    HISTOGRAM_MAX_BINS: int = Field(10, ge=1)

    # --- Data Preview ---
    PREVIEW_PAGE_SIZE: int = Field(100, ge=1)
    PREVIEW_MAX_PAGE_SIZE: int = Field(1000, ge=1)

    @field_validator("GROQ_API_KEY")
    @classmethod
    def validate_api_key(cls, v: Optional[str]) -> Optional[str]:
        """
        Normalises an empty key to None so callers only have to check one case.
        """
        if v is None:
            return v
        v = v.strip()
        return v or None


settings = Settings()
