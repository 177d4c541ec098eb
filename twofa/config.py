from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    # Application settings
    app_name: str = "FilHub Two-Factor Service"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # Database settings
    database_url: str = "sqlite+aiosqlite:///./twofa.db"

    # Two-factor settings
    totp_issuer: str = "FilHub"

    # QR rendering
    qr_box_size: int = 10
    qr_border: int = 4

    # Logging settings
    log_level: str = "INFO"
    log_json: bool = False

    # CORS settings
    allowed_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


settings = Settings()
