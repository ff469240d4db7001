from __future__ import annotations

import logging
import math

from timetabler.services.context import SearchContext
from timetabler.services.genotype import Genotype

logger = logging.getLogger(__name__)


class HillClimber:
    """Bounded random-move hill climbing that only accepts strict improvements.

    Each iteration proposes one move on a candidate copy, scores it and either
    copies the candidate into the live genotype or undoes the move. Under the
    proximity objective the move swaps the slots of two exams; under the
    timeslot-count objective it sends one exam to another slot already in use,
    and the move must keep that exam conflict-free.
    """

    def __init__(self, context: SearchContext) -> None:
        self.context = context
        self.random = context.random
        self.evaluator = context.evaluator
        self.iterations = context.config.hill_climb_iterations
        self.first_improvement = context.config.hill_climb_first_improvement

    def climb(self, genotype: Genotype) -> int:
        """Run the iteration budget on ``genotype`` in place; return accepted moves."""
        if math.isinf(genotype.aptitude):
            self.evaluator.score(genotype)
        if len(genotype) == 0:
            return 0

        candidate = genotype.copy()
        propose = self._propose_relocation if self.evaluator.hard_feasibility else self._propose_swap
        accepted = 0
        for _iteration in range(self.iterations):
            undo = propose(candidate)
            if undo is None:
                continue
            if self.evaluator.score(candidate) < genotype.aptitude:
                genotype.adopt(candidate)
                accepted += 1
                if self.first_improvement:
                    break
            else:
                undo()
                candidate.aptitude = genotype.aptitude
        if accepted:
            logger.debug("Hill climb accepted %d move(s), aptitude now %s", accepted, genotype.aptitude)
        return accepted

    def _propose_swap(self, candidate: Genotype):
        exam_count = len(candidate)
        exam_a = self.random.randrange(exam_count)
        exam_b = self.random.randrange(exam_count)
        candidate.swap(exam_a, exam_b)
        return lambda: candidate.swap(exam_a, exam_b)

    def _propose_relocation(self, candidate: Genotype):
        exam = self.random.randrange(len(candidate))
        current = candidate.assignment[exam]
        targets = sorted(slot for slot in candidate.slot_occupancy if slot != current)
        if not targets:
            return None
        target = self.random.choice(targets)
        if not candidate.is_exam_feasible(exam, target):
            return None
        candidate.assign(exam, target)
        return lambda: candidate.assign(exam, current)
