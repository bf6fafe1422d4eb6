import os
from dotenv import load_dotenv

load_dotenv()

def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")

class Settings:
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./socialhub.db")
    jwt_secret: str = os.getenv("JWT_SECRET", "change-me-in-production")
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    jwt_expires_minutes: int = int(os.getenv("JWT_EXPIRES_MINUTES", str(7 * 24 * 60)))
    bcrypt_rounds: int = int(os.getenv("BCRYPT_ROUNDS", "12"))
    # Platform access/refresh tokens are Fernet-encrypted at rest.
    fernet_key: str = os.getenv("FERNET_KEY", "")
    # Minute loop for due posts. Standard 5-field cron: m h dom mon dow
    scheduler_enabled: bool = _flag("SCHEDULER_ENABLED")
    scheduler_cron: str = os.getenv("SCHEDULER_CRON", "* * * * *")
    scheduler_batch_size: int = int(os.getenv("SCHEDULER_BATCH_SIZE", "10"))
    publish_timeout_seconds: float = float(os.getenv("PUBLISH_TIMEOUT_SECONDS", "30"))
    frontend_url: str = os.getenv("FRONTEND_URL", "http://localhost:3000")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

settings = Settings()
