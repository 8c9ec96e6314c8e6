from pydantic_settings import BaseSettings
from functools import lru_cache
import os


class Settings(BaseSettings):
    app_name: str = "Candidate Profile Engine API"
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"
    log_level: str = "INFO"

    # Database - supports both SQLite (local) and PostgreSQL (production)
    database_url: str = "sqlite+aiosqlite:///./profile_engine.db"

    # CORS - comma-separated list of allowed origins
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # AI/LLM Configuration
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    extraction_timeout_seconds: float = 60.0

    # Blob storage: "supabase" or "local"
    storage_backend: str = "local"
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    resume_bucket: str = "candidate_resume"
    local_storage_dir: str = "uploads/resumes"
    public_base_url: str = "http://localhost:8000"

    # Upload policies (MB)
    resume_max_size_mb: int = 10
    cv_max_size_mb: int = 15

    # "full_form" marks every created profile 100% complete,
    # "sections" scores the optional sections actually supplied
    profile_completion_policy: str = "full_form"

    class Config:
        env_file = ".env"
        extra = "ignore"
        # Make field names case-insensitive for environment variables
        case_sensitive = False

    def get_cors_origins(self) -> list:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
