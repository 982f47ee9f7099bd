from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_secret_key: str = ""

    # Colors are written back in this notation ("rgb" -> "rgb(r, g, b)", "hex" -> "#rrggbb")
    color_notation: Literal["rgb", "hex"] = "rgb"

    # External wallet pass service (refreshes passes already issued to customers)
    pass_service_url: str = ""
    pass_service_token: str = ""
    pass_service_timeout: float = 30.0

    # Plans
    enforce_plan_limits: bool = False

    # Activation: how many times to re-issue when the re-fetched list is inconsistent
    activation_verify_attempts: int = 2

    # Server
    environment: str = "development"
    cors_origin_pattern: str = r"^https://([a-z0-9-]+\.)?cardstudio\.app$"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
