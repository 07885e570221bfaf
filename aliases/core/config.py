from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "aliases"

    # Redis backend holding definitions, mappings and counters
    REDIS_HOST: str = "127.0.0.1"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str = ""
    REDIS_MAX_CONNECTIONS: int = 50
    # Seconds to wait for a free pooled connection
    REDIS_POOL_TIMEOUT: float = 5.0
    REDIS_CONNECT_TIMEOUT: float = 2.0
    REDIS_SOCKET_TIMEOUT: float = 5.0
    # Idle connections are checked before reuse after this many seconds
    REDIS_HEALTH_CHECK_INTERVAL: int = 300

    HTTP_HOST: str = "127.0.0.1"
    HTTP_PORT: int = 8080
    TLS_KEY_FILE: Optional[str] = None
    TLS_CERT_FILE: Optional[str] = None

    # Alias generation
    MAX_ATTEMPTS: int = 100
    RAND_DEFAULT_CHARS: str = "abcdefghijklmnopqrstuvwxyz0123456789"
    RAND_DEFAULT_MINLEN: int = 8
    RAND_MIN_LENGTH: int = 4
    RAND_MIN_CHARS: int = 8

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

settings = Settings()
