from pydantic_settings import BaseSettings
from sqlalchemy.engine import URL
from typing import Optional
import logging
from logging.handlers import RotatingFileHandler
import os

DEFAULT_LOG_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "..", "logs")

def setup_logging(log_level: str = "INFO", log_dir: Optional[str] = None):
    log_dir = log_dir or DEFAULT_LOG_DIR
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, "app.log")

    level = getattr(logging, log_level.upper(), logging.INFO)
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    formatter = logging.Formatter(log_format)

    file_handler = RotatingFileHandler(log_file, maxBytes=1000000, backupCount=5, encoding="utf-8")
    file_handler.setFormatter(formatter)
    file_handler.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)

    logging.basicConfig(
        level=level,
        handlers=[file_handler, console_handler]
    )

class Settings(BaseSettings):
    # MySQL connection parts, used when DATABASE_URL is not given
    DB_HOST: str = "localhost"
    DB_USER: str = "root"
    DB_PASSWORD: str = ""
    DB_NAME: str = "roy"
    DB_PORT: int = 3306

    # Pool: QUEUE_LIMIT=0 means waiting callers are never rejected
    DB_POOL_SIZE: int = 10
    DB_QUEUE_LIMIT: int = 0
    DB_ACQUIRE_TIMEOUT: Optional[float] = 30.0
    DB_QUERY_TIMEOUT: Optional[float] = 30.0

    DATABASE_URL: Optional[str] = None
    CHAT_LOG_URL: Optional[str] = None
    CREATE_TABLES: bool = False

    ANTHROPIC_API_KEY: Optional[str] = None
    ANTHROPIC_MODEL: str = "claude-3-5-sonnet-latest"
    ANTHROPIC_BASE_URL: str = "https://api.anthropic.com"
    LLM_TIMEOUT: float = 60.0

    REDIS_URL: Optional[str] = None
    ENABLE_RATE_LIMITING: bool = True

    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        url = URL.create(
            "mysql+aiomysql",
            username=self.DB_USER,
            password=self.DB_PASSWORD or None,
            host=self.DB_HOST,
            port=self.DB_PORT,
            database=self.DB_NAME,
        )
        return url.render_as_string(hide_password=False)

    @property
    def chat_log_url(self) -> str:
        return self.CHAT_LOG_URL or self.database_url

settings = Settings()
