from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "CardCoach"
    debug: bool = False

    database_url: str = "postgresql+asyncpg://localhost:5432/cardcoach"

    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"

    # Session cookie lifetime
    token_max_age_days: int = 30

    bcrypt_rounds: int = 8

    # Frontend origins allowed to send the session cookie
    cors_origins: list[str] = ["http://localhost:3000"]


settings = Settings()


# =============================================================================
# ACCOUNT LIMITS
# =============================================================================

MAX_USERNAME_LENGTH = 20

MIN_PASSWORD_LENGTH = 8

# Cookie carrying "bearer <jwt>"
TOKEN_COOKIE_NAME = "token"
