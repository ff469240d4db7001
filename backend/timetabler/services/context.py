from __future__ import annotations

from dataclasses import dataclass
import random

from timetabler.schemas.search import SearchConfig
from timetabler.services.conflict_model import ConflictMatrix
from timetabler.services.fitness import FitnessEvaluator, build_evaluator


@dataclass(frozen=True)
class SearchContext:
    """Per-run state shared by every operator. Built once, never global."""

    config: SearchConfig
    conflicts: ConflictMatrix
    evaluator: FitnessEvaluator
    random: random.Random
    seed: int

    @classmethod
    def create(cls, config: SearchConfig, conflicts: ConflictMatrix, *, seed: int) -> "SearchContext":
        return cls(
            config=config,
            conflicts=conflicts,
            evaluator=build_evaluator(config.objective, conflicts),
            random=random.Random(seed),
            seed=seed,
        )
