import os
from pydantic import BaseModel

def _optional_int(name: str) -> int | None:
    raw = os.getenv(name)
    return int(raw) if raw else None

class Settings(BaseModel):
    # Basic
    ENV: str = os.getenv("ENV", "dev")
    DEFAULT_CURRENCY: str = os.getenv("CURRENCY", "CAD")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Valuation
    VALUATION_PROVIDER: str = os.getenv("VALUATION_PROVIDER", "local")  # local | openai
    CURRENT_YEAR: int | None = _optional_int("VALUATION_CURRENT_YEAR")  # pin "today" for reproducible runs

    # Remote valuation (OpenAI + web search)
    OPENAI_API_KEY: str | None = os.getenv("OPENAI_API_KEY")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    OPENAI_TIMEOUT_SECONDS: float = float(os.getenv("OPENAI_TIMEOUT_SECONDS", "60"))

    # Security
    API_KEY: str | None = os.getenv("API_KEY")
    RATE_LIMIT_RPM: int = int(os.getenv("RATE_LIMIT_RPM", "60"))

    # CORS
    ALLOW_ORIGINS: str = os.getenv("ALLOW_ORIGINS", "*")

    # Metrics
    PROMETHEUS_ENABLED: bool = os.getenv("PROMETHEUS_ENABLED", "true").lower() == "true"

settings = Settings()
