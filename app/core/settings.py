"""
Core settings and environment variables for Civic Guard.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    # Application
    APP_NAME: str = "Civic Guard"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    PORT: int = 2000

    # CORS - Frontend URLs allowed to access this API
    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:5174,http://127.0.0.1:5173"

    # Firebase/Firestore
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON
    FIREBASE_STORAGE_BUCKET: Optional[str] = None
    FIREBASE_WEB_API_KEY: Optional[str] = None  # Identity Toolkit (email/password sign-in)

    # Mock DB mode for local development without Firebase credentials
    USE_MOCK_DB: bool = False
    MOCK_DB_PATH: Optional[str] = "./mock_db.json"  # Empty -> memory only

    # Reporter flow
    # The citizen app has no wallet integration yet, every report is filed under this identity
    DEFAULT_WALLET_ADDRESS: str = "0xCbB7Fc4A9CE612C65DcB0151F29b67Cf66a4C2f2"
    MAX_IMAGE_BYTES: int = 5 * 1024 * 1024

    # Review workflow
    DEFAULT_REWARD_AMOUNT: float = 10
    ANCHOR_BASE_URL: str = "https://safespot-blockchain.vercel.app"
    ANCHOR_TIMEOUT_SECONDS: float = 10.0

    # Notification relay (client side, used by the reporter flow)
    RELAY_BASE_URL: str = "http://localhost:2000"
    RELAY_TIMEOUT_SECONDS: float = 10.0

    # Notification relay (server side)
    # - RELAY_API_KEY: when set, POST /alert and /send-email require X-Relay-Key
    # - RELAY_RATE_LIMIT_PER_MINUTE: per-client fixed window for an open relay
    #   (no RELAY_API_KEY); keyed callers are exempt, 0 disables
    RELAY_API_KEY: Optional[str] = None
    RELAY_RATE_LIMIT_PER_MINUTE: int = 60

    # Telephony (Twilio REST API)
    TELEPHONY_ACCOUNT_SID: Optional[str] = None
    TELEPHONY_AUTH_TOKEN: Optional[str] = None
    TELEPHONY_FROM_NUMBER: Optional[str] = None
    TELEPHONY_TO_NUMBER: Optional[str] = None
    TELEPHONY_ANNOUNCEMENT_URL: str = "https://demo.twilio.com/welcome/voice/"
    TELEPHONY_API_BASE: str = "https://api.twilio.com/2010-04-01"

    # Email (SMTP relay)
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    EMAIL_SENDER: Optional[str] = None  # Defaults to SMTP_USER
    EMAIL_RECIPIENT: Optional[str] = None

    # Session gate
    LOGIN_PATH: str = "/login"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"  # Allow extra env vars to prevent crashes


# Global settings instance
settings = Settings()
