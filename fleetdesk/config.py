from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "sqlite+pysqlite:///./fleetdesk.db"
    debug: bool = False
    log_level: str = "INFO"
    maintenance_overdue_factor: float = 1.1
    maintenance_poll_seconds: int = 30
    default_page_size: int = 10
    currency_label: str = "INR"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="")


settings = Settings()
