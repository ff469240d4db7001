from __future__ import annotations

from abc import ABC, abstractmethod
import random

from timetabler.schemas.search import ObjectivePolicy, ProximityObjective
from timetabler.services.conflict_model import ConflictMatrix
from timetabler.services.genotype import Genotype, feasible_genotype, random_genotype


class FitnessEvaluator(ABC):
    """Objective policy: scores genotypes (lower is better) and builds initial ones."""

    name: str
    hard_feasibility: bool
    timeslot_count: int | None = None

    def __init__(self, conflicts: ConflictMatrix) -> None:
        self.conflicts = conflicts

    @abstractmethod
    def evaluate(self, genotype: Genotype) -> float:
        raise NotImplementedError

    @abstractmethod
    def initial_genotype(self, rng: random.Random, *, max_retries: int) -> Genotype:
        raise NotImplementedError

    def score(self, genotype: Genotype) -> float:
        genotype.aptitude = self.evaluate(genotype)
        return genotype.aptitude


class ProximityPenaltyEvaluator(FitnessEvaluator):
    """Penalises conflicting exams scheduled close together in a fixed set of slots.

    Each conflicting pair costs ``penalty_weights[distance] * shared_students``, where
    distance 0 is a same-slot clash and distances past the schedule cost nothing. The
    total is divided by the number of students.
    """

    name = "proximity"
    hard_feasibility = False

    def __init__(self, conflicts: ConflictMatrix, *, timeslot_count: int, penalty_weights: tuple[int, ...]) -> None:
        super().__init__(conflicts)
        self.timeslot_count = timeslot_count
        self.penalty_weights = tuple(penalty_weights)

    def evaluate(self, genotype: Genotype) -> float:
        assignment = genotype.assignment
        weights = self.penalty_weights
        reach = len(weights)
        penalty = 0
        for exam_a, exam_b, shared in self.conflicts.conflicting_pairs():
            distance = abs(assignment[exam_a] - assignment[exam_b])
            if distance < reach:
                penalty += weights[distance] * shared
        return penalty / (self.conflicts.student_count or 1)

    def initial_genotype(self, rng: random.Random, *, max_retries: int) -> Genotype:
        return random_genotype(self.conflicts, self.timeslot_count, rng)


class TimeslotCountEvaluator(FitnessEvaluator):
    name = "timeslot_count"
    hard_feasibility = True

    def evaluate(self, genotype: Genotype) -> int:
        return genotype.used_timeslots()

    def initial_genotype(self, rng: random.Random, *, max_retries: int) -> Genotype:
        return feasible_genotype(self.conflicts, rng, max_retries=max_retries)


def build_evaluator(objective: ObjectivePolicy, conflicts: ConflictMatrix) -> FitnessEvaluator:
    if isinstance(objective, ProximityObjective):
        return ProximityPenaltyEvaluator(
            conflicts,
            timeslot_count=objective.timeslot_count,
            penalty_weights=objective.penalty_weights,
        )
    return TimeslotCountEvaluator(conflicts)
