"""Runtime settings for EquaSolver, read from the environment."""

import logging
import os
from dataclasses import dataclass, field

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _split_origins(raw: str) -> list[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass
class Settings:
    """Tunable defaults (environment variables override them)."""

    log_level: str = field(default_factory=lambda: os.getenv("EQUASOLVER_LOG_LEVEL", "WARNING"))

    # Newton-Raphson system solver
    system_max_iterations: int = field(
        default_factory=lambda: int(os.getenv("EQUASOLVER_SYSTEM_MAX_ITERATIONS", "100"))
    )
    system_tolerance: float = field(
        default_factory=lambda: float(os.getenv("EQUASOLVER_SYSTEM_TOLERANCE", "1e-7"))
    )

    # HTTP API
    cors_origins: list = field(
        default_factory=lambda: _split_origins(os.getenv("EQUASOLVER_CORS_ORIGINS", "*"))
    )

    def __post_init__(self):
        if self.system_max_iterations < 1:
            raise ValueError("system_max_iterations must be at least 1")
        if self.system_tolerance <= 0:
            raise ValueError("system_tolerance must be positive")


def load_settings() -> Settings:
    """Build a fresh Settings from the current environment."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Attach a root handler at the configured level.

    Library modules only create loggers; applications call this once.
    """
    settings = settings or load_settings()
    level = getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format=LOG_FORMAT)
