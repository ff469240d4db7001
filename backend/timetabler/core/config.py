from functools import lru_cache
import json
from pathlib import Path
from typing import Annotated

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from timetabler.core.exceptions import ConfigurationError


PROJECT_ENV_FILE = Path(__file__).resolve().parents[3] / ".env"


class Settings(BaseSettings):
    # Later files win: a .env in the working directory overrides the checkout one.
    model_config = SettingsConfigDict(
        env_prefix="TIMETABLER_",
        env_file=(str(PROJECT_ENV_FILE), ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    project_name: str = "Exam Timetabler"

    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
    progress_interval: int = 50

    population_size: int = 10
    generation_count: int = 1000
    mutation_probability: float = 0.05
    hill_climb_probability: float = 0.2
    hill_climb_iterations: int = 30
    hill_climb_first_improvement: bool = False
    tournament_size: int = 3
    elite_count: int = 1
    selection_strategy: str = "tournament"
    max_construction_retries: int = 100
    max_repair_retries: int = 20
    random_seed: int | None = None

    penalty_weights: Annotated[list[int], NoDecode] = [32, 16, 8, 4, 2, 1]

    @field_validator("penalty_weights", mode="before")
    @classmethod
    def split_penalty_weights(cls, value: str | list[int]) -> list[int]:
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("["):
                try:
                    parsed = json.loads(stripped)
                    if isinstance(parsed, list):
                        return [int(item) for item in parsed]
                except json.JSONDecodeError:
                    pass
            return [int(item.strip()) for item in value.split(",") if item.strip()]
        return value

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.strip().upper()


@lru_cache
def get_settings() -> Settings:
    return Settings()


def load_settings() -> Settings:
    """Return the cached settings, reporting bad ``TIMETABLER_*`` values as a ConfigurationError."""
    try:
        return get_settings()
    except ValidationError as exc:
        problems = [
            f"{'.'.join(str(part) for part in error['loc']) or 'settings'}: {error['msg']}"
            for error in exc.errors()
        ]
        raise ConfigurationError(
            f"Invalid settings: {'; '.join(problems)}",
            details={"errors": problems},
        ) from exc
