from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from timetabler.services.context import SearchContext
from timetabler.services.genotype import Genotype


def rank_population(population: Sequence[Genotype]) -> list[Genotype]:
    # Stable: ties keep population order.
    return sorted(population, key=lambda genotype: genotype.aptitude)


def best_of(population: Sequence[Genotype]) -> Genotype:
    best = population[0]
    for genotype in population[1:]:
        if genotype.aptitude < best.aptitude:
            best = genotype
    return best


class SelectionPolicy(ABC):
    """Builds the next candidate pool. Winners are copies, so varying one pool
    member never touches the population or another pool member."""

    def __init__(self, context: SearchContext) -> None:
        self.context = context
        self.random = context.random

    @abstractmethod
    def select(self, population: Sequence[Genotype], count: int) -> list[Genotype]:
        raise NotImplementedError


class TournamentSelection(SelectionPolicy):
    def __init__(self, context: SearchContext) -> None:
        super().__init__(context)
        self.tournament_size = context.config.tournament_size

    def select(self, population: Sequence[Genotype], count: int) -> list[Genotype]:
        pool: list[Genotype] = []
        for _ in range(count):
            contenders = self.random.choices(population, k=self.tournament_size)
            pool.append(best_of(contenders).copy())
        return pool


class TruncationSelection(SelectionPolicy):
    """Keeps the top ``truncation_size`` genotypes and cycles through them."""

    def __init__(self, context: SearchContext) -> None:
        super().__init__(context)
        config = context.config
        self.truncation_size = config.truncation_size or max(1, config.population_size // 2)

    def select(self, population: Sequence[Genotype], count: int) -> list[Genotype]:
        survivors = rank_population(population)[: self.truncation_size]
        return [survivors[index % len(survivors)].copy() for index in range(count)]


def build_selection(context: SearchContext) -> SelectionPolicy:
    if context.config.selection_strategy == "truncation":
        return TruncationSelection(context)
    return TournamentSelection(context)
