import os


class Settings:
    def __init__(self):
        self.app_name = "Fleetdesk"
        self.api_version = "1.0.0"
        self.environment = os.getenv("FLEETDESK_ENV", "development")
        self.secret_key = os.getenv("FLEETDESK_SECRET_KEY", "CHANGE_ME")
        self.SECRET_KEY = self.secret_key
        self.access_token_expire_minutes = 30
        self.ACCESS_TOKEN_EXPIRE_MINUTES = self.access_token_expire_minutes
        self.database_url = os.getenv("FLEETDESK_DATABASE_URL", "sqlite:///./fleetdesk.db")
        self.log_level = os.getenv("FLEETDESK_LOG_LEVEL", "INFO")
        self.nbp_api_url = os.getenv("FLEETDESK_NBP_API_URL", "https://api.nbp.pl/api")
        self.nbp_timeout_seconds = 10
        self.default_page_size = 20
        self.max_page_size = 100


_settings_instance = None


def get_settings():
    """Return a singleton Settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
