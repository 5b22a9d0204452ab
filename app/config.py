# app/config.py
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings
from functools import lru_cache
from dotenv import load_dotenv

# Carregar variáveis do .env
load_dotenv()


class Settings(BaseSettings):
    # API Settings
    api_v1_str: str = "/api/v1"
    project_name: str = "EAD Progress API"
    version: str = "1.0.0"
    description: str = "Cálculo de progresso curricular e próxima atividade por matrícula"

    # CORS
    backend_cors_origins: list[str] = [
        "http://localhost",
        "http://localhost:3000",
        "http://localhost:5173",
        "https://localhost",
        "https://localhost:3000",
        "https://localhost:5173",
    ]

    # Curriculum placeholders ({n} = posição + 1)
    activity_title_template: str = "Activity {n}"
    module_title_template: str = "Module {n}"

    # Roster
    roster_max_concurrency: int = Field(8, ge=1)
    roster_fetch_timeout_seconds: Optional[float] = Field(10.0, gt=0)

    # Logging
    log_level: str = "INFO"

    model_config = {
        "case_sensitive": False,
        "env_file": ".env",
        "extra": "ignore"  # Ignora campos extras do .env
    }


@lru_cache()
def get_settings():
    """
    Cria uma instância única das configurações (singleton)
    """
    return Settings()

