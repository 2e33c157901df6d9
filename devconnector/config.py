"""
Configuration management using Pydantic BaseSettings.
All values can be overridden via environment variables or a .env file.
"""
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Database (MySQL-protocol compatible) ───────────────────────────────
    # An explicit URL wins over the mysql_* parts (e.g. sqlite+aiosqlite://)
    database_url: Optional[str] = None
    mysql_host: str = "mysql"
    mysql_port: int = 3306
    mysql_user: str = "root"
    mysql_password: str = ""
    mysql_database: str = "devconnector"

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"mysql+aiomysql://{self.mysql_user}:{self.mysql_password}"
            f"@{self.mysql_host}:{self.mysql_port}/{self.mysql_database}"
        )

    # ── Auth tokens ────────────────────────────────────────────────────────
    jwt_secret: Optional[str] = None
    jwt_algorithm: str = "HS256"
    jwt_ttl_seconds: int = 3600          # 1h, no refresh
    token_header: str = "x-auth-token"

    # ── Accounts ───────────────────────────────────────────────────────────
    bcrypt_rounds: int = 10
    gravatar_size: str = "200"
    gravatar_rating: str = "pg"
    gravatar_default: str = "mm"

    # ── Observability ──────────────────────────────────────────────────────
    otel_enabled: bool = True
    otel_exporter_otlp_endpoint: str = "http://jaeger:4317"
    service_name: str = "devconnector-api"
    environment: str = "development"
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
