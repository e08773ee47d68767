from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # Unrelated variables in .env are simply ignored
        extra="ignore",
    )

    # Database settings
    DATABASE_URL: str = "sqlite:///./tasktracker.db"
    DB_ECHO: bool = False

    # Session settings
    AUTH_SESSION_DAYS: int = 7

    # Comma separated list of allowed browser origins
    FRONTEND_ORIGIN: str = "http://localhost:5173"

    # Bootstrap admin, used only when no active admin exists
    ADMIN_SEED_EMAIL: str = "admin@ptm.com"
    ADMIN_SEED_PASSWORD: str = "Admin@123"
    ADMIN_SEED_NAME: str = "System Admin"
    SEED_DEFAULT_STATUSES: bool = True

    # Project settings
    PROJECT_NAME: str = "Task Tracker API"
    API_V1_STR: str = "/api/v1"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.FRONTEND_ORIGIN.split(",") if origin.strip()]


DEFAULT_TASK_STATUSES = ("To Do", "In Progress", "Done")

settings = Settings()
