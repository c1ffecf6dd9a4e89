from pydantic import field_validator
from pydantic_settings import BaseSettings

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "amqp-dead-letter"
    VERSION: str = "1.0.0"

    # Logging
    LOG_LEVEL: str = "WARNING"
    LOG_JSON: bool = False

    # Broker
    CONNECT_TIMEOUT: float = 10.0

    # Triage
    OUTPUT_DIR: str = "."
    PROMPT_MESSAGE: str = "choose an action"

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        if v.upper() not in LOG_LEVELS:
            raise ValueError(f"Log level must be one of: {LOG_LEVELS}")
        return v.upper()

    @field_validator("CONNECT_TIMEOUT")
    @classmethod
    def validate_connect_timeout(cls, v):
        if v <= 0:
            raise ValueError("Connect timeout must be positive")
        return v

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


# Global settings instance
settings = Settings()
