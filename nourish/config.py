from enum import Enum

from pydantic_settings import BaseSettings, SettingsConfigDict


class Env(Enum):
    local = "local"
    dev = "dev"
    prod = "prod"


class Provider(Enum):
    gemini = "gemini"
    openai = "openai"


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    env: Env = Env.local
    provider: Provider = Provider.gemini
    gemini_api_key: str | None = None
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta/"
    text_model: str = "gemini-2.5-flash"
    image_model: str = "gemini-2.5-flash-image"
    openai_api_key: str | None = None
    openai_text_model: str = "gpt-4o-mini"
    openai_image_model: str = "gpt-image-1"
    timeout: float = 60 * 2
    suggestion_count: int = 5
    default_language: str = "en"
    db_url: str = "sqlite+aiosqlite:///nourish.db"
    log_level: str = "INFO"
