"""
Core settings and environment variables for Community Help API.
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
    APP_NAME: str = "Community Help API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS - comma separated origins allowed to call the API (Expo web, local dev)
    CORS_ORIGINS: str = "http://localhost:8081,http://localhost:19006,http://127.0.0.1:8081"

    # Firebase/Firestore
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON
    FIREBASE_WEB_API_KEY: Optional[str] = None  # Needed for password sign-in via Identity Toolkit

    # In-memory Firestore for local development and tests
    USE_MOCK_DB: bool = False

    # Cloudinary image hosting (unsigned uploads)
    CLOUDINARY_CLOUD_NAME: Optional[str] = None
    CLOUDINARY_UPLOAD_PRESET: str = "community_reports"
    CLOUDINARY_TIMEOUT_SECONDS: float = 15.0
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    # Geocoding
    # - GEOCODING_PROVIDER: "nominatim" (default, no API key) or "google"
    # - GOOGLE_MAPS_API_KEY: optional; only used when provider is "google"
    GEOCODING_PROVIDER: str = "nominatim"
    GOOGLE_MAPS_API_KEY: Optional[str] = None

    # Map defaults (Manila) and marker cache
    MAP_DEFAULT_LATITUDE: float = 14.5995
    MAP_DEFAULT_LONGITUDE: float = 120.9842
    MAP_DEFAULT_DELTA: float = 0.05
    MAP_CACHE_TTL_SECONDS: float = 30.0

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

    @property
    def cors_origins_list(self):
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


# Global settings instance
settings = Settings()
