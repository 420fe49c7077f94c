import logging
import warnings

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Environment
    environment: str = "development"  # development | test | production

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    public_base_url: str = "http://localhost:8000"

    # Database (sqlite for local dev, postgresql+asyncpg for production)
    database_url: str = "sqlite+aiosqlite:///./data/negosyo.db"
    database_echo: bool = False
    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_pool_timeout_seconds: int = 30
    database_pool_recycle_seconds: int = 1800
    sqlite_busy_timeout_ms: int = 5000

    # Auth
    jwt_secret_key: str = "dev-secret-change-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 24 * 7  # 7 days
    admin_creator_ids: str = ""  # Comma-separated creator IDs with admin access

    # Groq (OpenAI-compatible API) for extraction and transcription
    groq_api_key: str = ""
    groq_base_url: str = "https://api.groq.com/openai/v1"
    groq_chat_model: str = "llama-3.3-70b-versatile"
    groq_transcription_model: str = "whisper-large-v3"
    llm_timeout_seconds: float = 60.0
    media_download_timeout_seconds: float = 60.0

    # Netlify hosting
    netlify_api_token: str = ""
    netlify_api_url: str = "https://api.netlify.com/api/v1"
    netlify_team_slug: str = ""
    netlify_site_name_max_length: int = 63
    hosting_timeout_seconds: float = 30.0
    hosting_max_retries: int = 2
    hosting_retry_backoff_seconds: float = 0.5

    # Email (SMTP)
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    email_from: str = "Negosyo Digital <no-reply@negosyo.digital>"
    email_timeout_seconds: float = 20.0

    # Payment instructions shown in the approval email
    payment_gcash_number: str = "0917-000-0000"
    payment_gcash_name: str = "Negosyo Digital"

    # Object storage: local directory served under storage_public_url
    storage_path: str = "./data/uploads"
    storage_public_url: str = "http://localhost:8000/uploads"
    storage_max_upload_bytes: int = 15 * 1024 * 1024  # 15MB

    # Submission workflow
    submission_min_photos: int = 3
    default_submission_amount: float = 1000.00
    default_creator_payout: float = 500.00
    generation_stale_seconds: int = 300

    # CORS
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def admin_ids(self) -> set[str]:
        return {cid.strip() for cid in self.admin_creator_ids.split(",") if cid.strip()}


settings = Settings()

# Warn on insecure defaults (logged at startup, not a hard error for dev convenience)
_logger = logging.getLogger("negosyo.config")
_INSECURE_SECRETS = {
    "dev-secret-change-in-production",
    "change-me-to-a-random-string",
}


def validate_security_posture(cfg: Settings) -> None:
    is_prod = cfg.environment.lower() in {"production", "prod"}

    if cfg.jwt_secret_key in _INSECURE_SECRETS:
        if is_prod:
            raise RuntimeError(
                "FATAL: JWT_SECRET_KEY is set to an insecure default. "
                "Set a strong random secret via the JWT_SECRET_KEY environment variable before deploying to production."
            )
        warnings.warn(
            "JWT_SECRET_KEY is set to the default insecure value. "
            "Set a strong random secret via the JWT_SECRET_KEY environment variable for production.",
            stacklevel=1,
        )

    if cfg.cors_origins == "*":
        if is_prod:
            raise RuntimeError(
                "FATAL: CORS_ORIGINS cannot be '*' in production. "
                "Set explicit trusted origins via the CORS_ORIGINS environment variable."
            )
        _logger.warning(
            "CORS_ORIGINS is set to '*' (allow all). "
            "Configure specific origins for production via the CORS_ORIGINS environment variable."
        )

    if is_prod:
        if not cfg.netlify_api_token:
            _logger.warning("NETLIFY_API_TOKEN is empty; publishing will fail until it is configured.")
        if not cfg.groq_api_key:
            _logger.warning("GROQ_API_KEY is empty; transcription and extraction will fail.")


validate_security_posture(settings)
