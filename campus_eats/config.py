import os
import tempfile
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    env: str = "local"
    database_url: str = "sqlite:///./campus_eats.db"

    secret_key: str = "change-me"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7

    # campus clock used for the daily listing deadline
    timezone: str = "Asia/Tehran"
    listing_expiry_hour: int = 14
    listing_max_price: int = 60000
    flag_threshold: int = 3

    upload_dir: str = os.path.join(tempfile.gettempdir(), "campus_eats_uploads")
    admin_emails: List[str] = []
    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "allow"


settings = Settings()
