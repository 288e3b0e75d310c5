import os
from typing import List

from dotenv import load_dotenv
from fastapi import Request
from pydantic_settings import BaseSettings

# Prefer .env.production if present, else default .env
if os.path.exists(".env.production"):
    load_dotenv(".env.production")
else:
    load_dotenv()


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./firewood.db"
    sql_echo: bool = False
    auto_create_tables: bool = True

    # Blank token leaves the write endpoints open
    sync_api_token: str = ""
    sync_timeout_seconds: float = 30.0

    reference_cache_ttl_seconds: int = 300
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]


settings = Settings()


def get_settings(request: Request) -> Settings:
    """Settings of the app serving the request (see create_app)"""
    return request.app.state.settings
