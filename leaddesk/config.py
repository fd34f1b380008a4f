"""Configurações da aplicação - carrega variáveis do .env"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",  # carrega local
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ===========================================
    # CORE
    # ===========================================
    environment: str = "development"
    database_url: str
    secret_key: str
    access_token_expire_minutes: int = 1440
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # Separado por vírgula
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # ===========================================
    # NOTIFICAÇÕES
    # ===========================================
    notifications_limit: int = 50

    # ===========================================
    # PRIMEIRO ADMIN (criado no startup se o banco estiver vazio)
    # ===========================================
    seed_admin_username: Optional[str] = None
    seed_admin_password: Optional[str] = None
    seed_admin_email: str = "admin@leaddesk.local"

    # ===========================================
    # PROPRIEDADES
    # ===========================================
    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def seed_admin_configured(self) -> bool:
        """Verifica se o admin inicial está configurado."""
        return bool(self.seed_admin_username and self.seed_admin_password)

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
