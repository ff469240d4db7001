from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
import logging

from timetabler.core.exceptions import InputValidationError

logger = logging.getLogger(__name__)


class ConflictMatrix:
    """Symmetric exam-by-exam count of shared students.

    Stored sparsely: ``self._adjacency[i]`` maps every exam ``j`` that shares at least
    one student with ``i`` to that number of students. Self pairs are never stored.
    The matrix is read-only once built.
    """

    def __init__(self, exam_count: int, adjacency: list[dict[int, int]], student_count: int) -> None:
        self.exam_count = exam_count
        self.student_count = student_count
        self._adjacency = adjacency
        self._neighbours = tuple(tuple(sorted(row)) for row in adjacency)

    @classmethod
    def from_enrollments(cls, exam_count: int, enrollments: Iterable[Sequence[int]]) -> "ConflictMatrix":
        if isinstance(exam_count, bool) or not isinstance(exam_count, int) or exam_count < 1:
            raise InputValidationError(
                f"Exam count must be a positive integer, got {exam_count!r}",
                details={"exam_count": exam_count},
            )

        adjacency: list[dict[int, int]] = [{} for _ in range(exam_count)]
        student_count = 0
        for record_index, record in enumerate(enrollments):
            exams = list(dict.fromkeys(_validated_exam(exam, exam_count, record_index) for exam in record))
            student_count += 1
            for position, exam in enumerate(exams):
                row = adjacency[exam]
                for other in exams[position + 1:]:
                    row[other] = row.get(other, 0) + 1
                    adjacency[other][exam] = adjacency[other].get(exam, 0) + 1

        matrix = cls(exam_count, adjacency, student_count)
        logger.debug(
            "Built conflict matrix exams=%d students=%d density=%.4f",
            exam_count,
            student_count,
            matrix.conflict_density,
        )
        return matrix

    def weight(self, exam_a: int, exam_b: int) -> int:
        if exam_a == exam_b:
            return 0
        return self._adjacency[exam_a].get(exam_b, 0)

    def neighbours(self, exam: int) -> tuple[int, ...]:
        return self._neighbours[exam]

    def conflicting_pairs(self) -> Iterator[tuple[int, int, int]]:
        """Yield ``(i, j, weight)`` once per conflicting pair, with ``i < j``."""
        for exam, row in enumerate(self._adjacency):
            for other, weight in row.items():
                if exam < other:
                    yield exam, other, weight

    @property
    def conflict_count(self) -> int:
        return sum(len(row) for row in self._adjacency) // 2

    @property
    def conflict_density(self) -> float:
        possible_pairs = self.exam_count * (self.exam_count - 1) // 2
        if possible_pairs == 0:
            return 0.0
        return self.conflict_count / possible_pairs

    def as_dense(self) -> list[list[int]]:
        return [[self.weight(i, j) for j in range(self.exam_count)] for i in range(self.exam_count)]


def _validated_exam(exam: object, exam_count: int, record_index: int) -> int:
    if isinstance(exam, bool) or not isinstance(exam, int):
        raise InputValidationError(
            f"Enrollment {record_index} contains non-integer exam id {exam!r}",
            details={"record": record_index, "exam": repr(exam)},
        )
    if not 0 <= exam < exam_count:
        raise InputValidationError(
            f"Enrollment {record_index} references exam {exam} outside [0, {exam_count})",
            details={"record": record_index, "exam": exam, "exam_count": exam_count},
        )
    return exam
