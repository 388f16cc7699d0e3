from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from urllib.parse import quote_plus


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file="auditionapi/.env",
        env_file_encoding="utf-8",
        extra="allow",
    )
    # Application
    APP_NAME: str = "Audition AI Diamond API"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    CORS_ORIGINS: str = "*"

    # Database (Supabase Postgres)
    POSTGRES_HOST: str = ""
    POSTGRES_PORT: int = 5432
    POSTGRES_USERNAME: str = ""
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DATABASE: str = "postgres"

    # Full connection string, takes precedence over the POSTGRES_* parts
    DATABASE_URL: Optional[str] = None
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10

    @property
    def database_url(self) -> str:
        """Return DATABASE_URL or build one from the POSTGRES_* parts"""
        if self.DATABASE_URL:
            return self.DATABASE_URL

        # URL encode the password to handle special characters
        encoded_password = quote_plus(self.POSTGRES_PASSWORD)
        return f"postgresql+psycopg2://{self.POSTGRES_USERNAME}:{encoded_password}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DATABASE}"

    # Identity provider (Supabase Auth)
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""
    SUPABASE_JWT_SECRET: str = ""
    SUPABASE_JWT_AUDIENCE: str = "authenticated"
    JWT_ALGORITHM: str = "HS256"

    # Shared secret for the out-of-process render worker
    WORKER_AUTH_TOKEN: str = ""

    # Object storage (Cloudflare R2, S3 compatible)
    R2_ENDPOINT: Optional[str] = None
    R2_ACCESS_KEY_ID: Optional[str] = None
    R2_SECRET_ACCESS_KEY: Optional[str] = None
    R2_BUCKET_NAME: str = ""
    R2_PUBLIC_URL: str = ""

    # PayOS
    PAYOS_CLIENT_ID: str = ""
    PAYOS_API_KEY: str = ""
    PAYOS_CHECKSUM_KEY: str = ""
    PAYOS_BASE_URL: str = "https://api-merchant.payos.vn"
    PAYOS_TIMEOUT_SECONDS: int = 15
    PUBLIC_SITE_URL: str = "https://auditionai.io.vn"

    # Business Rules
    SIGNUP_DIAMONDS: int = 0
    SHARE_IMAGE_COST: int = 1
    GROUP_IMAGE_UPSCALER_COST: int = 1
    COMIC_PANEL_BASE_COST: int = 10
    COMIC_PANEL_2K_SURCHARGE: int = 10
    COMIC_PANEL_4K_SURCHARGE: int = 15
    REFERRAL_BONUS: int = 5
    REFERRAL_CODE_MIN_LENGTH: int = 8
    PAYMENT_APPROVAL_XP: int = 50

    # Daily check-in
    CHECK_IN_BASE_REWARD: int = 5
    CHECK_IN_BONUS_PER_DAY: int = 1
    CHECK_IN_MAX_STREAK_BONUS: int = 6
    CHECK_IN_XP_REWARD: int = 10
    MILESTONE_DAYS: list[int] = [7, 14, 30]

    # Timezone used for calendar-day comparisons (Vietnam, UTC+7)
    TIMEZONE_OFFSET_HOURS: int = 7

    @property
    def payos_configured(self) -> bool:
        return bool(
            self.PAYOS_CLIENT_ID and self.PAYOS_API_KEY and self.PAYOS_CHECKSUM_KEY
        )


settings = Settings()
