from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = ""
    environment: str = "dev"
    # Storage settings
    storage_backend: str = "local"  # only local is supported
    storage_path: str = "storage/uploads"
    upload_max_size: int = 5 * 1024 * 1024  # 5MB per file
    # Placeholder references stored when an application is submitted without uploads
    default_profile_picture: str = "default_profile.jpg"
    default_document: str = "default_document.pdf"
    # Authentication settings
    secret_key: str = "asms-secret-key-change-in-production"  # Should be set via environment variable
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    password_min_length: int = 6
    password_max_length: int = 20
    # Application number generation
    application_number_max_attempts: int = 5
    # System admin initialization settings
    system_admin_email: str = ""
    system_admin_password: str = ""
    system_admin_full_name: str = ""
    # CORS settings
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = False
    cors_allow_methods: list[str] = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    cors_allow_headers: list[str] = ["Authorization", "Content-Type"]
    cors_expose_headers: list[str] = []


class LoggingSettings(BaseSettings):
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # "text" or "json"
    ENV: str = "dev"  # dev | staging | prod

    class Config:
        env_prefix = "APP_"


logging_settings = LoggingSettings()

settings = Settings()  # type: ignore
