from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = Field(default="Magix Data Analyzer")
    api_port: int = Field(default=8000)
    database_url: str
    jwt_secret: str
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=60 * 8)
    rate_limit: str = Field(default="120/minute")
    iva_rate: float = Field(default=0.19)
    import_max_bytes: int = Field(default=10 * 1024 * 1024)
    asistente_url: str = Field(default="")
    asistente_api_key: str = Field(default="")
    asistente_model: str = Field(default="gemini-2.5-pro")
    asistente_timeout: float = Field(default=30.0)
    admin_email: str = Field(default="admin@example.com")
    admin_password: str = Field(default="ChangeMe123!")
    log_level: str = Field(default="INFO")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
