import random

import pytest

from timetabler.schemas.search import ExamProblem, build_search_config
from timetabler.services.conflict_model import ConflictMatrix
from timetabler.services.context import SearchContext


@pytest.fixture()
def chain_problem():
    # Exams 0-1 and 1-2 share a student; 0 and 2 never meet.
    return ExamProblem(name="chain", exam_count=3, enrollments=[[0, 1], [1, 2]])


@pytest.fixture()
def chain_conflicts(chain_problem):
    return ConflictMatrix.from_enrollments(chain_problem.exam_count, chain_problem.enrollments)


@pytest.fixture()
def dense_problem():
    # Twelve exams: a few clusters plus random pairs, fixed by seed.
    rng = random.Random(1234)
    enrollments = [[0, 1, 2, 3], [3, 4, 5], [5, 6, 7, 8], [8, 9, 0], [1, 5, 9], [2, 6], [10], [11, 4]]
    for _ in range(10):
        enrollments.append(rng.sample(range(12), 2))
    return ExamProblem(name="dense", exam_count=12, enrollments=enrollments)


@pytest.fixture()
def dense_conflicts(dense_problem):
    return ConflictMatrix.from_enrollments(dense_problem.exam_count, dense_problem.enrollments)


def make_context(conflicts, *, seed=7, **overrides):
    values = {"objective": {"kind": "timeslot_count"}, "random_seed": seed}
    values.update(overrides)
    config = build_search_config(**values)
    return SearchContext.create(config, conflicts, seed=seed)


@pytest.fixture()
def context_factory():
    return make_context


@pytest.fixture()
def carter_dataset(tmp_path):
    (tmp_path / "mini.crs").write_text("0001 2\n0002 2\n0003 1\n0004 1\n", encoding="utf-8")
    (tmp_path / "mini.stu").write_text("0001 0002\n0002 0003 \n\n0001 0004\n0004\n", encoding="utf-8")
    return tmp_path / "mini"
