"""
Configurações centralizadas do sistema usando Pydantic Settings.
Todas as variáveis de ambiente são carregadas e validadas aqui.
"""

from functools import lru_cache
from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configurações globais da aplicação"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ========================================
    # APLICAÇÃO
    # ========================================
    app_name: str = Field(default="Game Dashboard API")
    app_version: str = Field(default="0.1.0")
    environment: str = Field(default="development")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # ========================================
    # API/SERVER
    # ========================================
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    api_reload: bool = Field(default=True)
    allowed_origins: str = Field(default="*")

    # ========================================
    # FIRESTORE
    # ========================================
    google_cloud_project: Optional[str] = Field(default=None)
    firestore_database: str = Field(default="(default)")
    google_application_credentials: Optional[str] = Field(default=None)
    firestore_emulator_host: Optional[str] = Field(default=None)
    firestore_timeout_seconds: float = Field(default=30.0)
    firestore_check_on_startup: bool = Field(default=True)

    chats_collection: str = Field(default="chats")
    jobs_collection: str = Field(default="processing_jobs")
    agent_responses_collection: str = Field(default="agent_responses")
    phase_analyses_collection: str = Field(default="phase_analyses")

    # ========================================
    # ANALYTICS
    # ========================================
    chats_sample_limit: int = Field(default=1000, ge=1, le=3000)
    agent_responses_sample_limit: int = Field(default=5000, ge=1)
    done_jobs_sample_limit: int = Field(default=500, ge=1)
    top_words_limit: int = Field(default=50, ge=1)
    default_period: str = Field(default="7d")
    # gameId em agent_responses só pode ir para a query se houver índice composto
    agent_responses_filter_game_in_query: bool = Field(default=False)
    debug_chat_fields_max: int = Field(default=20, ge=1)

    @field_validator("default_period")
    @classmethod
    def validate_default_period(cls, v: str) -> str:
        """Aceita apenas períodos conhecidos"""
        if v not in ("24h", "7d", "30d", "all"):
            raise ValueError(f"Invalid default period: {v}")
        return v

    # ========================================
    # MÉTODOS AUXILIARES
    # ========================================

    @property
    def is_development(self) -> bool:
        """Verifica se está em modo desenvolvimento"""
        return self.environment.lower() in ("development", "dev", "local")

    @property
    def is_production(self) -> bool:
        """Verifica se está em modo produção"""
        return self.environment.lower() in ("production", "prod")

    @property
    def is_firestore_configured(self) -> bool:
        """Verifica se há projeto, credenciais ou emulador do Firestore"""
        return bool(
            self.google_cloud_project
            or self.google_application_credentials
            or self.firestore_emulator_host
        )

    def get_cors_origins(self) -> List[str]:
        """Retorna lista de origens permitidas para CORS"""
        if self.allowed_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.allowed_origins.split(",")]

    def model_dump_safe(self) -> dict:
        """Retorna configurações sem dados sensíveis"""
        data = self.model_dump()
        sensitive_keys = ["google_application_credentials"]
        for key in sensitive_keys:
            if key in data and data[key]:
                data[key] = "***HIDDEN***"
        return data


@lru_cache
def get_settings() -> Settings:
    """
    Retorna instância única de Settings (Singleton).
    Usa LRU cache para evitar recarregar .env múltiplas vezes.
    """
    return Settings()


# Instância global (opcional, para conveniência)
settings = get_settings()


# Validação ao importar (fail-fast)
if __name__ == "__main__":
    print("🔧 Validando configurações...")
    s = get_settings()
    print(f"✅ App: {s.app_name} v{s.app_version}")
    print(f"✅ Environment: {s.environment}")
    print(f"✅ Firestore project: {s.google_cloud_project or '(ADC)'}")
    print(f"✅ Firestore database: {s.firestore_database}")
    print(f"✅ Amostra de chats: {s.chats_sample_limit}")
    print(f"✅ Amostra de agent_responses: {s.agent_responses_sample_limit}")
    print("\n📋 Configurações completas (sem secrets):")
    import json
    print(json.dumps(s.model_dump_safe(), indent=2, ensure_ascii=False))
