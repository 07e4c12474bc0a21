import os
from typing import List, Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Always load .env from root
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
load_dotenv(os.path.join(BASE_DIR, ".env"))


class Settings(BaseSettings):
    JWT_SECRET: str = os.getenv("JWT_SECRET", "change-me")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRE_MINUTES: int = int(os.getenv("JWT_EXPIRE_MINUTES", 1440))  # 24 hours default

    DB_USER: Optional[str] = os.getenv("DB_USER")
    DB_PASS: Optional[str] = os.getenv("DB_PASS")
    DB_HOST: Optional[str] = os.getenv("DB_HOST", "localhost")
    DB_PORT: Optional[str] = os.getenv("DB_PORT", "5432")
    FLEET_DB_NAME: Optional[str] = os.getenv("FLEET_DB_NAME", "fleet")
    DB_SSLMODE: str = os.getenv("DB_SSLMODE", "require")

    # full URL wins over the DB_* parts (sqlite for local runs and tests)
    DATABASE_URL: Optional[str] = os.getenv("DATABASE_URL")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:8080"]

    # maintenance reminder window used when a schedule does not set its own
    DUE_SOON_DAYS: int = int(os.getenv("DUE_SOON_DAYS", 7))
    # put parts back on the shelf when a work order is cancelled
    RESTOCK_ON_CANCEL: bool = os.getenv("RESTOCK_ON_CANCEL", "False").lower() == "true"
    # seconds to wait for a busy inventory item / order before giving up
    LOCK_TIMEOUT_SECONDS: float = float(os.getenv("LOCK_TIMEOUT_SECONDS", 10))

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()


def build_database_url(cfg: Settings = settings) -> str:
    if cfg.DATABASE_URL:
        return cfg.DATABASE_URL
    return (
        f"postgresql+psycopg2://{cfg.DB_USER}:{cfg.DB_PASS}@{cfg.DB_HOST}:{cfg.DB_PORT}/{cfg.FLEET_DB_NAME}?sslmode={cfg.DB_SSLMODE}"
    )


FLEET_DATABASE_URL = build_database_url()
