import os


class Settings:
    def __init__(self):
        self.app_name = "InvoicePro"
        self.api_version = "1.0.0"
        self.environment = os.getenv("INVOICEPRO_ENVIRONMENT", "development")
        self.secret_key = os.getenv("INVOICEPRO_SECRET_KEY", "CHANGE_ME")
        self.SECRET_KEY = self.secret_key
        self.access_token_expire_minutes = int(os.getenv("INVOICEPRO_ACCESS_TOKEN_EXPIRE_MINUTES", "30"))
        self.ACCESS_TOKEN_EXPIRE_MINUTES = self.access_token_expire_minutes
        self.database_url = os.getenv("INVOICEPRO_DATABASE_URL", "sqlite:///./invoicepro.db")
        self.log_level = os.getenv("INVOICEPRO_LOG_LEVEL", "INFO").upper()
        self.storage_dir = os.getenv("INVOICEPRO_STORAGE_DIR", "./.invoicepro")
        origins = os.getenv("INVOICEPRO_CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")
        self.cors_origins = [origin.strip() for origin in origins.split(",") if origin.strip()]


_settings_instance = None


def get_settings():
    """Return a singleton Settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
