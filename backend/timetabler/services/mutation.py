from __future__ import annotations

import logging

from timetabler.core.exceptions import RepairExhaustedError
from timetabler.services.context import SearchContext
from timetabler.services.genotype import Genotype

logger = logging.getLogger(__name__)


class MutationOperator:
    def __init__(self, context: SearchContext) -> None:
        self.context = context
        self.random = context.random
        self.evaluator = context.evaluator
        self.probability = context.config.mutation_probability
        self.max_retries = context.config.max_repair_retries

    def mutate(self, genotype: Genotype) -> int:
        """Resample each gene with the mutation probability, then rescore once.

        Returns the number of genes that actually changed. Under the timeslot-count
        objective a gene only moves to a conflict-free slot; when none is found within
        the retry budget the gene keeps its value.
        """
        if self.evaluator.hard_feasibility:
            changed = self._mutate_feasibly(genotype)
        else:
            changed = self._mutate_freely(genotype)
        self.evaluator.score(genotype)
        return changed

    def _mutate_freely(self, genotype: Genotype) -> int:
        timeslot_count = self.evaluator.timeslot_count
        changed = 0
        for exam in range(len(genotype)):
            if self.random.random() < self.probability:
                timeslot = self.random.randrange(timeslot_count)
                if genotype.assign(exam, timeslot) != timeslot:
                    changed += 1
        return changed

    def _mutate_feasibly(self, genotype: Genotype) -> int:
        changed = 0
        for exam in range(len(genotype)):
            if self.random.random() >= self.probability:
                continue
            try:
                genotype.reassign_feasibly(exam, self.random, max_retries=self.max_retries)
            except RepairExhaustedError as exc:
                logger.debug("Mutation reverted: %s", exc.message)
                continue
            changed += 1
        return changed
