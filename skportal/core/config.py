from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    # App
    app_name: str = "SK Portal"
    debug: bool = False
    
    # CORS
    cors_origins: str = "http://localhost:5173"
    
    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]
    
    # Database
    database_url: str = "sqlite:///./skportal.db"
    
    # Security
    secret_key: str = "dev-secret-key-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    
    # Blob storage
    storage_dir: str = "./storage"
    signed_url_expire_seconds: int = 3600
    max_report_bytes: int = 10 * 1024 * 1024  # 10MB, PDF only
    max_id_document_bytes: int = 5 * 1024 * 1024  # 5MB, JPG/PNG/PDF
    
    # Roster rules
    female_quota_percent: int = 30
    branch_coordinator_slots: int = 10
    structure_catalog_path: Optional[str] = None  # YAML override
    
    # Logging
    log_level: str = "INFO"
    log_dir: str = "./logs"
    log_to_file: bool = False
    
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
