"""Carter benchmark file I/O.

An instance ``NAME`` is a pair of files:

* ``NAME.crs``: one exam per non-blank line (``<exam-id> <enrolment>``).
* ``NAME.stu``: one student per non-blank line, whitespace-separated exam ids.

Exam ids in the files are 1-based; everything past this module is 0-based.
"""

from __future__ import annotations

import logging
from pathlib import Path

from timetabler.core.exceptions import InputValidationError
from timetabler.schemas.search import BestSolution, ExamProblem, build_exam_problem

logger = logging.getLogger(__name__)

COURSES_SUFFIX = ".crs"
STUDENTS_SUFFIX = ".stu"


def dataset_paths(dataset: str | Path) -> tuple[Path, Path]:
    base = Path(dataset)
    if base.suffix in {COURSES_SUFFIX, STUDENTS_SUFFIX}:
        base = base.with_suffix("")
    return base.with_name(base.name + COURSES_SUFFIX), base.with_name(base.name + STUDENTS_SUFFIX)


def _read_lines(path: Path) -> list[str]:
    try:
        return path.read_text(encoding="utf-8").splitlines()
    except FileNotFoundError as exc:
        raise InputValidationError(f"Dataset file not found: {path}", details={"path": str(path)}) from exc
    except UnicodeDecodeError as exc:
        raise InputValidationError(
            f"Dataset file is not valid UTF-8: {path}",
            details={"path": str(path), "position": exc.start},
        ) from exc
    except OSError as exc:
        raise InputValidationError(
            f"Cannot read dataset file {path}: {exc.strerror or exc}",
            details={"path": str(path)},
        ) from exc


def count_exams(path: Path) -> int:
    return sum(1 for line in _read_lines(path) if line.strip())


def read_enrollments(path: Path, exam_count: int) -> list[list[int]]:
    enrollments: list[list[int]] = []
    for line_number, line in enumerate(_read_lines(path), start=1):
        tokens = line.split()
        if not tokens:
            continue
        record: list[int] = []
        for token in tokens:
            try:
                exam_id = int(token)
            except ValueError as exc:
                raise InputValidationError(
                    f"{path}:{line_number}: exam id {token!r} is not an integer",
                    details={"path": str(path), "line": line_number, "token": token},
                ) from exc
            if not 1 <= exam_id <= exam_count:
                raise InputValidationError(
                    f"{path}:{line_number}: exam id {exam_id} outside 1..{exam_count}",
                    details={"path": str(path), "line": line_number, "exam": exam_id},
                )
            record.append(exam_id - 1)
        enrollments.append(record)
    return enrollments


def load_carter_instance(dataset: str | Path) -> ExamProblem:
    courses_path, students_path = dataset_paths(dataset)
    exam_count = count_exams(courses_path)
    if exam_count == 0:
        raise InputValidationError(f"No exams listed in {courses_path}", details={"path": str(courses_path)})
    enrollments = read_enrollments(students_path, exam_count)
    logger.info("Loaded %s: %d exams, %d students", courses_path.stem, exam_count, len(enrollments))
    return build_exam_problem(name=courses_path.stem, exam_count=exam_count, enrollments=enrollments)


def write_solution(path: str | Path, solution: BestSolution) -> Path:
    target = Path(path)
    lines = [f"{exam + 1} {timeslot}" for exam, timeslot in enumerate(solution.assignment)]
    target.write_text("\n".join(lines) + "\n", encoding="utf-8")
    logger.info("Wrote solution to %s", target)
    return target
