"""
Land registration certificate service settings
"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings"""

    # App
    APP_NAME: str = "Land Registration Certificate Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = True

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Database (named DB_URL to avoid clashing with a global DATABASE_URL)
    DB_URL: str = "sqlite+aiosqlite:///./data/certificates.db"

    # JWT
    SECRET_KEY: str = "your-super-secret-key-change-in-production-32chars"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 24 hours
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # Certificate / registration numbers
    CERTIFICATE_NUMBER_PREFIX: str = "LRMS"
    REGISTRATION_NUMBER_PREFIX: str = "REG"
    NUMBER_MAX_ATTEMPTS: int = 5

    # Asset resolution
    ASSET_FETCH_TIMEOUT: float = 10.0  # seconds, per fetch
    MAX_ASSET_SIZE: int = 5 * 1024 * 1024  # 5MB
    ASSET_MAX_DIMENSION: int = 1024  # px, longest side after normalization
    ALLOWED_IMAGE_EXTENSIONS: list = ["png", "jpg", "jpeg", "svg"]
    ALLOWED_IMAGE_MIME_TYPES: list = ["image/png", "image/jpeg", "image/jpg", "image/svg+xml"]
    EMBLEM_URL: str = "https://flagcdn.com/h240/et.png"

    # Jurisdiction boilerplate (primary / local)
    JURISDICTION_NAME: str = "Federal Democratic Republic of Ethiopia"
    JURISDICTION_NAME_LOCAL: str = "የኢትዮጵያ ፌዴራላዊ ዴሞክራሲያዊ ሪፐብሊክ"
    ISSUING_AUTHORITY: str = "Land Registration Authority"
    ISSUING_AUTHORITY_LOCAL: str = "የመሬት ምዝገባ ባለስልጣን"
    REGISTRY_OFFICE_NAME: str = "Land Registration Office"

    # Optical code
    QR_BOX_SIZE: int = 10
    QR_BORDER: int = 4
    VERIFICATION_BASE_URL: str = "https://lrms.gov.et/verify-certificate"

    # Rendering
    CERTIFICATE_FONT_FILE: str = ""  # optional TTF with Ethiopic glyphs
    RASTER_DPI: int = 150

    # CORS
    CORS_ORIGINS: list = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Logging
    LOG_LEVEL: str = "DEBUG"
    LOG_FILE: str = "./logs/app.log"

    class Config:
        env_file = ".env.backend"
        case_sensitive = True
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Return the settings singleton"""
    return Settings()


settings = get_settings()
