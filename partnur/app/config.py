"""
Application configuration settings
"""
import os
import logging
from pathlib import Path
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings"""

    # API Configuration
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "3000"))
    API_RELOAD: bool = os.getenv("API_RELOAD", "false").lower() == "true"
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "production")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Project Paths
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    DATA_DIR: Path = BASE_DIR / "data"

    # Database Configuration
    DATABASE_URL: str = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR / 'data' / 'db' / 'partnur.db'}")
    DB_POOL_TIMEOUT: int = int(os.getenv("DB_POOL_TIMEOUT", "10"))

    # OpenAI Configuration
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_TIMEOUT_SECONDS: float = float(os.getenv("OPENAI_TIMEOUT_SECONDS", "20"))
    OPENAI_MAX_RETRIES: int = int(os.getenv("OPENAI_MAX_RETRIES", "0"))

    # Extraction Model Configuration (profile field extraction, low temperature)
    EXTRACTION_MODEL: str = os.getenv("EXTRACTION_MODEL", "gpt-4")
    EXTRACTION_TEMPERATURE: float = float(os.getenv("EXTRACTION_TEMPERATURE", "0.1"))
    EXTRACTION_MAX_TOKENS: int = int(os.getenv("EXTRACTION_MAX_TOKENS", "300"))

    # Response Model Configuration (advisor replies)
    RESPONSE_MODEL: str = os.getenv("RESPONSE_MODEL", "gpt-4")
    RESPONSE_TEMPERATURE: float = float(os.getenv("RESPONSE_TEMPERATURE", "0.7"))
    RESPONSE_MAX_TOKENS: int = int(os.getenv("RESPONSE_MAX_TOKENS", "500"))

    # CORS
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")
    CORS_ALLOW_CREDENTIALS: bool = os.getenv("CORS_ALLOW_CREDENTIALS", "false").lower() == "true"

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    RATE_LIMIT_DEFAULT: str = os.getenv("RATE_LIMIT_DEFAULT", "200/minute")
    RATE_LIMIT_CHAT: str = os.getenv("RATE_LIMIT_CHAT", "30/minute")

    # Conversation logging
    LOG_WRITER_WORKERS: int = int(os.getenv("LOG_WRITER_WORKERS", "2"))

    # Analytics defaults
    ANALYTICS_DEFAULT_DAYS: int = int(os.getenv("ANALYTICS_DEFAULT_DAYS", "30"))
    ANALYTICS_PREVIEW_DAYS: int = int(os.getenv("ANALYTICS_PREVIEW_DAYS", "7"))
    TRENDS_DEFAULT_LIMIT: int = int(os.getenv("TRENDS_DEFAULT_LIMIT", "100"))

    # New profiles start with only the mobile number filled
    INITIAL_COMPLETION_SCORE: int = int(os.getenv("INITIAL_COMPLETION_SCORE", "5"))
    DEFAULT_LANGUAGE_PREF: str = os.getenv("DEFAULT_LANGUAGE_PREF", "Hinglish")

    class Config:
        case_sensitive = True
        env_file = ".env"
        extra = "ignore"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.DATA_DIR.mkdir(parents=True, exist_ok=True)

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    def get_openai_api_key(self) -> str:
        """
        Get the OpenAI API key

        Returns:
            OpenAI API key, or an empty string when it is not configured
        """
        if self.OPENAI_API_KEY:
            masked = f"{self.OPENAI_API_KEY[:10]}...{self.OPENAI_API_KEY[-4:]}" if len(self.OPENAI_API_KEY) > 14 else "***"
            logger.info(f"get_openai_api_key() returning: {masked}")
        else:
            logger.warning("get_openai_api_key() called but OPENAI_API_KEY is empty!")
        return self.OPENAI_API_KEY


# Global settings instance
settings = Settings()
