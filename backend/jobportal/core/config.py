from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database (unreachable database switches the process to in-memory storage)
    DATABASE_URL: str = "sqlite:///./jobportal.db"

    # Recruiter token signing - the app refuses to start without a secret
    JWT_SECRET: str = ""
    ALGORITHM: str = "HS256"
    RECRUITER_TOKEN_EXPIRE_DAYS: int = 30
    PASSWORD_RESET_EXPIRE_MINUTES: int = 60

    # Comma-separated recruiter emails allowed to register / use recruiter routes
    ALLOWED_COMPANY_EMAILS: str = ""

    # External identity provider (applicant bearer tokens)
    IDENTITY_JWKS_URL: str = ""
    IDENTITY_ISSUER: str = ""
    IDENTITY_AUTHORIZED_PARTIES: str = ""

    # Remote object storage (optional)
    CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_API_KEY: str = ""
    CLOUDINARY_API_SECRET: str = ""

    # Local uploads
    UPLOAD_DIR: str = "uploads"

    # Outbound email (optional - reset links are logged when unset)
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASS: str = ""
    SMTP_SECURE: bool = False
    MAIL_FROM: str = "no-reply@job-portal.local"

    # Error telemetry
    SENTRY_DSN: str = ""

    # Application
    APP_NAME: str = "Job Portal"
    DEBUG: bool = False
    SEED_DEMO_DATA: bool = False
    BACKEND_URL: str = "http://localhost:5000"
    FRONTEND_URL: str = "http://localhost:5173"
    BACKEND_CORS_ORIGINS: str = (
        "http://localhost:5173,"
        "http://127.0.0.1:5173"
    )

    @property
    def company_allowlist(self) -> list[str]:
        return split_csv(self.ALLOWED_COMPANY_EMAILS, lower=True)

    @property
    def authorized_parties(self) -> list[str]:
        return split_csv(self.IDENTITY_AUTHORIZED_PARTIES)

    @property
    def cloudinary_configured(self) -> bool:
        return bool(
            self.CLOUDINARY_CLOUD_NAME
            and self.CLOUDINARY_API_KEY
            and self.CLOUDINARY_API_SECRET
        )

    @property
    def smtp_configured(self) -> bool:
        return bool(self.SMTP_HOST and self.SMTP_USER and self.SMTP_PASS)


def split_csv(value: str, lower: bool = False) -> list[str]:
    """Split a comma-separated setting, dropping blanks."""
    items = [item.strip() for item in (value or "").split(",")]
    if lower:
        items = [item.lower() for item in items]
    return [item for item in items if item]


settings = Settings()
