# app/core/config.py

from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the project root directory (where .env should be located)
BASE_DIR = Path(__file__).resolve().parent.parent.parent

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra="ignore"
    )

    # App Configuration
    APP_NAME: str = "Wholecoin API"
    DEBUG: bool = False
    VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # Database Configuration
    DATABASE_URL: str

    # JWT / Security Configuration
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080

    # CORS Configuration
    FRONTEND_URL: str = "http://localhost:3000"

    # Goal rules
    REFERENCE_CURRENCY: str = "INR"
    MIN_CONTRIBUTION_AMOUNT: float = 100.0
    MIN_DEPOSIT_AMOUNT: float = 100.0
    MAX_GOAL_YEARS: int = 10

    # Price oracle: "mock" uses fixed USD prices, "jupiter" calls PRICE_API_URL
    PRICE_SOURCE: str = "mock"
    PRICE_API_URL: str = "https://lite-api.jup.ag/price/v3"
    USD_TO_REFERENCE_RATE: float = 83.0
    PRICE_CACHE_TTL_SECONDS: int = 300
    PRICE_TIMEOUT_SECONDS: float = 5.0

    # Simulated transfers
    SOLANA_NETWORK: str = "devnet"
    APP_WALLET_BALANCE: float = 1_000_000.0
    TRANSFER_TIMEOUT_SECONDS: float = 30.0

    # Deposit rate limiting (per user, fixed window)
    RATE_LIMIT_MAX_REQUESTS: int = 5
    RATE_LIMIT_WINDOW_SECONDS: int = 60

    # Optional: Environment
    ENVIRONMENT: str = "development"

    @property
    def is_sqlite(self) -> bool:
        """Check if we're running on a local SQLite database"""
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def is_supabase(self) -> bool:
        """Check if we're using Supabase database"""
        return any(d in self.DATABASE_URL for d in [
            "supabase.co",
            "supabase.com",
            "pooler.supabase",
        ])

# Create a global settings instance
settings = Settings()
