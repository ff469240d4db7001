from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
import logging
import math
import random

from timetabler.core.exceptions import InfeasibleConstructionError, RepairExhaustedError
from timetabler.services.conflict_model import ConflictMatrix

logger = logging.getLogger(__name__)


class Genotype:
    """Assignment of every exam to a timeslot.

    ``slot_occupancy`` counts exams per used timeslot and is kept in step with
    ``assignment`` by ``assign``; slots drop out of it when they empty. ``aptitude``
    is owned by the fitness evaluator and is ``inf`` until first scored.
    """

    def __init__(self, conflicts: ConflictMatrix, assignment: Sequence[int]) -> None:
        self.conflicts = conflicts
        self.assignment: list[int] = list(assignment)
        self.slot_occupancy: Counter[int] = Counter(self.assignment)
        self.aptitude: float = math.inf

    def __len__(self) -> int:
        return len(self.assignment)

    def __repr__(self) -> str:
        return f"Genotype(aptitude={self.aptitude!r}, timeslots={self.used_timeslots()})"

    def copy(self) -> "Genotype":
        clone = object.__new__(Genotype)
        clone.conflicts = self.conflicts
        clone.assignment = list(self.assignment)
        clone.slot_occupancy = Counter(self.slot_occupancy)
        clone.aptitude = self.aptitude
        return clone

    def adopt(self, other: "Genotype") -> None:
        """Replace this genotype's state with a copy of ``other``'s."""
        self.assignment = list(other.assignment)
        self.slot_occupancy = Counter(other.slot_occupancy)
        self.aptitude = other.aptitude

    def assign(self, exam: int, timeslot: int) -> int:
        previous = self.assignment[exam]
        if previous == timeslot:
            return previous
        self.slot_occupancy[previous] -= 1
        if self.slot_occupancy[previous] == 0:
            del self.slot_occupancy[previous]
        self.slot_occupancy[timeslot] += 1
        self.assignment[exam] = timeslot
        return previous

    def swap(self, exam_a: int, exam_b: int) -> None:
        # Occupancy is unchanged by a swap.
        self.assignment[exam_a], self.assignment[exam_b] = self.assignment[exam_b], self.assignment[exam_a]

    def used_timeslots(self) -> int:
        return len(self.slot_occupancy)

    def highest_timeslot(self) -> int:
        return max(self.slot_occupancy)

    def is_feasible(self) -> bool:
        return all(
            self.assignment[exam_a] != self.assignment[exam_b]
            for exam_a, exam_b, _weight in self.conflicts.conflicting_pairs()
        )

    def is_exam_feasible(self, exam: int, timeslot: int | None = None) -> bool:
        """Check one exam, optionally at a proposed ``timeslot``, against its conflicts."""
        target = self.assignment[exam] if timeslot is None else timeslot
        return all(self.assignment[other] != target for other in self.conflicts.neighbours(exam))

    def occupancy_matches_assignment(self) -> bool:
        return self.slot_occupancy == Counter(self.assignment)

    def reassign_feasibly(self, exam: int, rng: random.Random, *, max_retries: int) -> int:
        """Move ``exam`` to a different conflict-free timeslot.

        Candidates are the slots in use plus one fresh slot, sampled without
        repetition. Returns the new timeslot, or raises ``RepairExhaustedError``
        with the genotype untouched when ``max_retries`` candidates all clash.
        """
        current = self.assignment[exam]
        upper = min(len(self.assignment), self.highest_timeslot() + 2)
        candidates = [slot for slot in range(upper) if slot != current]
        for timeslot in rng.sample(candidates, min(len(candidates), max_retries)):
            if self.is_exam_feasible(exam, timeslot):
                self.assign(exam, timeslot)
                return timeslot
        raise RepairExhaustedError(exam, max_retries)


def random_genotype(conflicts: ConflictMatrix, timeslot_count: int, rng: random.Random) -> Genotype:
    return Genotype(conflicts, [rng.randrange(timeslot_count) for _ in range(conflicts.exam_count)])


def feasible_genotype(conflicts: ConflictMatrix, rng: random.Random, *, max_retries: int) -> Genotype:
    """Build a conflict-free genotype exam by exam, in index order.

    Each exam tries up to ``max_retries`` distinct slots among those already used
    plus one fresh slot. A budget at least as large as the slots in play always
    succeeds, since the fresh slot never clashes.
    """
    assignment: list[int] = []
    highest = -1
    for exam in range(conflicts.exam_count):
        assigned_neighbours = [other for other in conflicts.neighbours(exam) if other < exam]
        candidates = range(min(conflicts.exam_count, highest + 2))
        for timeslot in rng.sample(candidates, min(len(candidates), max_retries)):
            if all(assignment[other] != timeslot for other in assigned_neighbours):
                assignment.append(timeslot)
                highest = max(highest, timeslot)
                break
        else:
            raise InfeasibleConstructionError(
                f"Could not place exam {exam} without conflicts within {max_retries} retries",
                details={"exam": exam, "retries": max_retries, "timeslots_in_play": len(candidates)},
            )
    logger.debug("Constructed feasible genotype using %d timeslots", highest + 1)
    return Genotype(conflicts, assignment)
