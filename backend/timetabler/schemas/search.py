from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from timetabler.core.exceptions import ConfigurationError, InputValidationError

if TYPE_CHECKING:
    from timetabler.core.config import Settings

# Indexed by distance between two conflicting exams; index 0 is a same-slot clash.
DEFAULT_PENALTY_WEIGHTS: tuple[int, ...] = (32, 16, 8, 4, 2, 1)

SelectionStrategy = Literal["tournament", "truncation"]


class ProximityObjective(BaseModel):
    kind: Literal["proximity"] = "proximity"
    timeslot_count: int = Field(ge=1, le=10_000)
    penalty_weights: tuple[int, ...] = DEFAULT_PENALTY_WEIGHTS

    @field_validator("penalty_weights")
    @classmethod
    def validate_penalty_weights(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        if not value:
            raise ValueError("penalty_weights must not be empty")
        if value[0] <= 0:
            raise ValueError("penalty_weights must start with a positive same-slot penalty")
        if any(weight < 0 for weight in value):
            raise ValueError("penalty_weights must be non-negative")
        if any(left <= right for left, right in zip(value, value[1:])):
            raise ValueError("penalty_weights must strictly decrease with distance")
        return value


class TimeslotCountObjective(BaseModel):
    kind: Literal["timeslot_count"] = "timeslot_count"


ObjectivePolicy = Annotated[ProximityObjective | TimeslotCountObjective, Field(discriminator="kind")]


class SearchConfig(BaseModel):
    population_size: int = Field(default=10, ge=1, le=10_000)
    generation_count: int = Field(default=1000, ge=0, le=1_000_000)
    mutation_probability: float = Field(default=0.05, ge=0.0, le=1.0)
    hill_climb_probability: float = Field(default=0.2, ge=0.0, le=1.0)
    hill_climb_iterations: int = Field(default=30, ge=0, le=1_000_000)
    hill_climb_first_improvement: bool = False
    tournament_size: int = Field(default=3, ge=1, le=10_000)
    elite_count: int = Field(default=1, ge=0, le=10_000)
    selection_strategy: SelectionStrategy = "tournament"
    truncation_size: int | None = Field(default=None, ge=1, le=10_000)
    max_construction_retries: int = Field(default=100, ge=0, le=1_000_000)
    max_repair_retries: int = Field(default=20, ge=0, le=1_000_000)
    random_seed: int | None = Field(default=None, ge=0, le=2**32 - 1)
    objective: ObjectivePolicy

    @model_validator(mode="after")
    def validate_relationships(self) -> "SearchConfig":
        if self.elite_count > self.population_size:
            raise ValueError("elite_count cannot exceed population_size")
        if self.truncation_size is not None and self.truncation_size > self.population_size:
            raise ValueError("truncation_size cannot exceed population_size")
        return self

    @property
    def minimizes_timeslots(self) -> bool:
        return isinstance(self.objective, TimeslotCountObjective)

    @classmethod
    def from_settings(cls, settings: "Settings", **overrides) -> "SearchConfig":
        """Build a config from environment defaults, letting non-None overrides win."""
        values = {
            "population_size": settings.population_size,
            "generation_count": settings.generation_count,
            "mutation_probability": settings.mutation_probability,
            "hill_climb_probability": settings.hill_climb_probability,
            "hill_climb_iterations": settings.hill_climb_iterations,
            "hill_climb_first_improvement": settings.hill_climb_first_improvement,
            "tournament_size": settings.tournament_size,
            "elite_count": settings.elite_count,
            "selection_strategy": settings.selection_strategy,
            "max_construction_retries": settings.max_construction_retries,
            "max_repair_retries": settings.max_repair_retries,
            "random_seed": settings.random_seed,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        objective = values.get("objective")
        if isinstance(objective, dict) and objective.get("kind") == "proximity":
            objective.setdefault("penalty_weights", tuple(settings.penalty_weights))
        return build_search_config(**values)


def build_search_config(**values) -> SearchConfig:
    try:
        return SearchConfig(**values)
    except ValidationError as exc:
        problems = [
            f"{'.'.join(str(part) for part in error['loc']) or 'config'}: {error['msg']}"
            for error in exc.errors()
        ]
        raise ConfigurationError(
            f"Invalid search configuration: {'; '.join(problems)}",
            details={"errors": problems},
        ) from exc


class ExamProblem(BaseModel):
    model_config = ConfigDict(strict=True)

    name: str = "instance"
    exam_count: int = Field(ge=1)
    enrollments: list[list[int]] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_exam_ids(self) -> "ExamProblem":
        for index, record in enumerate(self.enrollments):
            for exam in record:
                if not 0 <= exam < self.exam_count:
                    raise ValueError(
                        f"enrollment {index} references exam {exam} outside [0, {self.exam_count})"
                    )
        return self


def build_exam_problem(**values) -> ExamProblem:
    try:
        return ExamProblem(**values)
    except ValidationError as exc:
        problems = [error["msg"] for error in exc.errors()]
        raise InputValidationError(
            f"Invalid exam problem: {'; '.join(problems)}",
            details={"errors": problems},
        ) from exc


class BestSolution(BaseModel):
    assignment: list[int]
    aptitude: float
    timeslots_used: int
    feasible: bool
    objective: Literal["proximity", "timeslot_count"]
    generations: int
    seed: int
    runtime_ms: int
    history: list[float] = Field(default_factory=list)
