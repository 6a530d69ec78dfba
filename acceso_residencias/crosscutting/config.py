"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Provide defaults for the edges of the access core (logging, timezone,
    failure policy of the time-window check)

Collaborators:
  - crosscutting/logger.py: reads log_level / log_json
  - domain/acceso_privilegiado.py: default politica_fallo_ventana
  - application/autorizacion.py: default zona_horaria_default

Constraints:
  - The evaluators never read settings directly when a value is passed
    explicitly; settings only fill defaults.
  - No business logic — pure configuration

Notes:
  - Singleton via lru_cache
"""

from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_POLITICAS_FALLO_VALIDAS = {"denegar", "propagar"}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_env: Application environment (development/test/production)
        log_level: Logging level name (default: INFO)
        log_json: Emit JSON logs (default: True)
        zona_horaria_default: IANA timezone used when a residence has none
        politica_fallo_ventana: denegar|propagar, behaviour when the
            time-window check itself fails (default: denegar)
    """

    app_env: str = "development"

    # Observability
    log_level: str = "INFO"
    log_json: bool = True

    # Access core
    zona_horaria_default: str = "America/Tegucigalpa"
    politica_fallo_ventana: str = "denegar"

    @field_validator("log_level")
    @classmethod
    def log_level_valid(cls, v: str) -> str:
        level = (v or "INFO").strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("log_level must be DEBUG, INFO, WARNING, ERROR or CRITICAL")
        return level

    @field_validator("zona_horaria_default")
    @classmethod
    def zona_horaria_default_valid(cls, v: str) -> str:
        zona = (v or "").strip()
        try:
            ZoneInfo(zona)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"zona_horaria_default is not a valid IANA zone: {v!r}") from exc
        return zona

    @field_validator("politica_fallo_ventana")
    @classmethod
    def politica_fallo_ventana_valid(cls, v: str) -> str:
        politica = (v or "denegar").strip().lower()
        if politica not in _POLITICAS_FALLO_VALIDAS:
            raise ValueError("politica_fallo_ventana must be denegar or propagar")
        return politica

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()
