from __future__ import annotations

import logging
import random
from time import perf_counter

from timetabler.core.exceptions import SchedulerError
from timetabler.schemas.search import BestSolution, ExamProblem, SearchConfig
from timetabler.services.conflict_model import ConflictMatrix
from timetabler.services.context import SearchContext
from timetabler.services.genotype import Genotype
from timetabler.services.local_search import HillClimber
from timetabler.services.mutation import MutationOperator
from timetabler.services.selection import best_of, build_selection, rank_population

logger = logging.getLogger(__name__)


def resolve_seed(random_seed: int | None) -> int:
    if random_seed is not None:
        return random_seed
    return random.SystemRandom().randrange(2**32)


class EvolutionEngine:
    """Generational (mu, lambda) search with elitism.

    Each generation copies the elite, fills the rest of the next population by
    selection, hill-climbs each selected genotype with ``hill_climb_probability``,
    mutates it, and appends the untouched elite. The loop always runs the full
    ``generation_count``.
    """

    def __init__(self, config: SearchConfig, problem: ExamProblem, *, progress_interval: int = 0) -> None:
        self.config = config
        self.problem = problem
        self.progress_interval = progress_interval
        self.conflicts = ConflictMatrix.from_enrollments(problem.exam_count, problem.enrollments)
        self.context = SearchContext.create(config, self.conflicts, seed=resolve_seed(config.random_seed))
        self.evaluator = self.context.evaluator
        self.random = self.context.random
        self.selection = build_selection(self.context)
        self.mutation = MutationOperator(self.context)
        self.hill_climber = HillClimber(self.context)
        self.population: list[Genotype] = []
        self.history: list[float] = []
        self.generation = 0

    def initialize(self) -> list[Genotype]:
        population = []
        for _ in range(self.config.population_size):
            genotype = self.evaluator.initial_genotype(
                self.random,
                max_retries=self.config.max_construction_retries,
            )
            self.evaluator.score(genotype)
            population.append(genotype)
        self.population = population
        self.history = []
        self.generation = 0
        return population

    def step(self) -> Genotype:
        """Advance one generation and return its best genotype."""
        if not self.population:
            raise SchedulerError("Population has not been initialized")

        elite = [genotype.copy() for genotype in rank_population(self.population)[: self.config.elite_count]]
        pool = self.selection.select(self.population, self.config.population_size - len(elite))
        for genotype in pool:
            if self.random.random() < self.config.hill_climb_probability:
                self.hill_climber.climb(genotype)
            self.mutation.mutate(genotype)

        self.population = pool + elite
        self.generation += 1
        best = best_of(self.population)
        self.history.append(best.aptitude)
        return best

    def run(self) -> BestSolution:
        start = perf_counter()
        logger.info(
            "Starting search instance=%s exams=%d students=%d density=%.4f objective=%s seed=%d",
            self.problem.name,
            self.conflicts.exam_count,
            self.conflicts.student_count,
            self.conflicts.conflict_density,
            self.evaluator.name,
            self.context.seed,
        )
        self.initialize()
        best = best_of(self.population)
        logger.info("Initial population best aptitude=%s", best.aptitude)

        for _generation in range(self.config.generation_count):
            best = self.step()
            logger.debug("Generation %d best aptitude=%s", self.generation, best.aptitude)
            if self.progress_interval and self.generation % self.progress_interval == 0:
                logger.info(
                    "Generation %d best aptitude=%s elapsed=%dms",
                    self.generation,
                    best.aptitude,
                    int((perf_counter() - start) * 1000),
                )

        best = best_of(self.population)
        runtime_ms = int((perf_counter() - start) * 1000)
        logger.info(
            "Search finished generations=%d best aptitude=%s timeslots=%d runtime=%dms",
            self.generation,
            best.aptitude,
            best.used_timeslots(),
            runtime_ms,
        )
        return BestSolution(
            assignment=list(best.assignment),
            aptitude=best.aptitude,
            timeslots_used=best.used_timeslots(),
            feasible=best.is_feasible(),
            objective=self.evaluator.name,
            generations=self.generation,
            seed=self.context.seed,
            runtime_ms=runtime_ms,
            history=list(self.history),
        )


def run(config: SearchConfig, problem: ExamProblem, *, progress_interval: int = 0) -> BestSolution:
    return EvolutionEngine(config, problem, progress_interval=progress_interval).run()
