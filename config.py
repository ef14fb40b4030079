"""
Application settings

Values come from environment variables (or a local .env file). The names used
by earlier deployments (MONGODB_URI, JWT_SECRET, EMAIL_*) are still accepted.
"""
import json
import logging
from typing import Annotated, List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_SIGNING_SECRET = "dev-secret-key-change-me"
ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    db_uri: str = Field(
        "mongodb://localhost:27017/ecommerce",
        validation_alias=AliasChoices("DB_URI", "MONGODB_URI", "DATABASE_URL"),
    )
    database_name: Optional[str] = Field(None, validation_alias=AliasChoices("DATABASE_NAME"))

    signing_secret: str = Field(
        DEFAULT_SIGNING_SECRET,
        validation_alias=AliasChoices("SIGNING_SECRET", "JWT_SECRET", "SECRET_KEY"),
    )
    token_algorithm: str = "HS256"
    token_expire_minutes: int = Field(
        ACCESS_TOKEN_EXPIRE_MINUTES, gt=0, validation_alias=AliasChoices("TOKEN_EXPIRE_MINUTES")
    )

    port: int = Field(5500, validation_alias=AliasChoices("PORT"))
    cors_origins: Annotated[List[str], NoDecode] = Field(["*"], validation_alias=AliasChoices("CORS_ORIGINS"))
    log_level: str = Field("INFO", validation_alias=AliasChoices("LOG_LEVEL"))

    mail_host: str = Field("sandbox.smtp.mailtrap.io", validation_alias=AliasChoices("MAIL_HOST", "EMAIL_HOST"))
    mail_port: int = Field(2525, validation_alias=AliasChoices("MAIL_PORT", "EMAIL_PORT"))
    mail_user: Optional[str] = Field(None, validation_alias=AliasChoices("MAIL_USER", "EMAIL_USER"))
    mail_password: Optional[str] = Field(None, validation_alias=AliasChoices("MAIL_PASSWORD", "EMAIL_PASS"))
    mail_from: Optional[str] = Field(None, validation_alias=AliasChoices("MAIL_FROM"))

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, value):
        # Either a JSON list or a comma-separated string such as "*" or "http://a,http://b".
        if isinstance(value, str):
            if value.strip().startswith("["):
                return json.loads(value)
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @property
    def mail_enabled(self) -> bool:
        return bool(self.mail_user and self.mail_password)

    @property
    def mail_sender(self) -> str:
        return self.mail_from or self.mail_user or "noreply@ecommerce.com"

    @property
    def uses_default_secret(self) -> bool:
        return self.signing_secret == DEFAULT_SIGNING_SECRET


def configure_logging(level: str = "INFO"):
    logging.basicConfig(level=level.upper(), format="%(asctime)s %(levelname)s %(name)s %(message)s")


def log_settings_summary(settings: Settings, logger: logging.Logger):
    """Log what is configured without ever printing a secret."""
    logger.info("Database: %s", settings.database_name or "(from URI)")
    logger.info("Token lifetime: %d minutes", settings.token_expire_minutes)
    if settings.uses_default_secret:
        logger.warning("SIGNING_SECRET is not set; tokens are signed with the insecure development default")
    if settings.mail_enabled:
        logger.info("Mail transport: %s:%s as %s", settings.mail_host, settings.mail_port, settings.mail_user)
    else:
        logger.info("Mail credentials not found. Order confirmation e-mails are disabled.")
