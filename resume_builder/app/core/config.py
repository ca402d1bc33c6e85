import logging
from functools import lru_cache

from pydantic import Field, PostgresDsn, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

log = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Values are read from the environment (or a `.env` file) with fallback
    defaults, covering the database connection, session signing, one-time
    code delivery and logging.

    Attributes:
        database_url (PostgresDsn): Database connection URL assembled from the DB_* settings.
        secret_key (str): Secret key for signing session and verification tokens.
        algorithm (str): Algorithm used for JWT encoding.
        access_token_expire_minutes (int): Lifetime of the session cookie token.
        otp_expire_minutes (int): Lifetime of an emailed one-time code.
        otp_resend_cooldown_seconds (int): Window during which a second code may not be requested.
        pending_verification_expire_minutes (int): Lifetime of the pending-verification cookie.
        log_level (str): Root logging level applied when the application starts.

    """

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    # Database settings
    db_host: str = Field(default="localhost", validation_alias="DB_HOST")
    db_port: int = Field(default=5432, validation_alias="DB_PORT")
    db_name: str = Field(default="resume_builder", validation_alias="DB_NAME")
    db_user: str = Field(default="postgres", validation_alias="DB_USER")
    db_password: str = Field(default="", validation_alias="DB_PASSWORD")

    @computed_field
    @property
    def database_url(self) -> PostgresDsn:
        """
        Assembled database URL from components.

        Returns:
            PostgresDsn: The fully assembled PostgreSQL connection URL.

        Notes:
            1. The scheme is set to "postgresql".
            2. Username, password, host, port and database name come from the DB_* settings.

        """
        return PostgresDsn.build(
            scheme="postgresql",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            path=self.db_name,
        )

    # Security settings
    secret_key: str = Field(
        default="your-secret-key-change-in-production",
        validation_alias="SECRET_KEY",
    )
    algorithm: str = Field(default="HS256", validation_alias="ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=120,
        validation_alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # One-time code settings
    otp_expire_minutes: int = Field(default=10, validation_alias="OTP_EXPIRE_MINUTES")
    otp_resend_cooldown_seconds: int = Field(
        default=60,
        validation_alias="OTP_RESEND_COOLDOWN_SECONDS",
    )
    pending_verification_expire_minutes: int = Field(
        default=30,
        validation_alias="PENDING_VERIFICATION_EXPIRE_MINUTES",
    )

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")


@lru_cache
def get_settings() -> Settings:
    """
    Get the global settings instance.

    Returns:
        Settings: The cached settings instance.

    Raises:
        ValidationError: If environment variables are present but invalid.

    Notes:
        1. Reads configuration from environment variables and the .env file.
        2. The instance is cached so the .env file is parsed once per process.
        3. This function performs disk access to read the .env file on first call.

    """
    return Settings()
