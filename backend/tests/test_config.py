import pytest

from timetabler.core.config import Settings, get_settings, load_settings
from timetabler.core.exceptions import ConfigurationError, InputValidationError
from timetabler.schemas.search import (
    DEFAULT_PENALTY_WEIGHTS,
    ProximityObjective,
    SearchConfig,
    TimeslotCountObjective,
    build_exam_problem,
    build_search_config,
)


def test_settings_defaults(monkeypatch):
    for name in ("TIMETABLER_POPULATION_SIZE", "TIMETABLER_PENALTY_WEIGHTS", "TIMETABLER_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings(_env_file=None)
    assert settings.population_size == 10
    assert settings.generation_count == 1000
    assert settings.penalty_weights == list(DEFAULT_PENALTY_WEIGHTS)
    assert settings.random_seed is None


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("TIMETABLER_POPULATION_SIZE", "24")
    monkeypatch.setenv("TIMETABLER_PENALTY_WEIGHTS", "8, 4,2")
    monkeypatch.setenv("TIMETABLER_LOG_LEVEL", "debug")
    settings = Settings(_env_file=None)
    assert settings.population_size == 24
    assert settings.penalty_weights == [8, 4, 2]
    assert settings.log_level == "DEBUG"


def test_settings_accept_json_penalty_weights(monkeypatch):
    monkeypatch.setenv("TIMETABLER_PENALTY_WEIGHTS", "[5, 3, 1]")
    assert Settings(_env_file=None).penalty_weights == [5, 3, 1]


def test_settings_read_dotenv_in_working_directory(monkeypatch, tmp_path):
    monkeypatch.delenv("TIMETABLER_POPULATION_SIZE", raising=False)
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text("TIMETABLER_POPULATION_SIZE=17\n", encoding="utf-8")
    assert Settings().population_size == 17


def test_load_settings_reports_bad_environment_values(monkeypatch):
    monkeypatch.setenv("TIMETABLER_PENALTY_WEIGHTS", "32,x")
    get_settings.cache_clear()
    try:
        with pytest.raises(ConfigurationError) as excinfo:
            load_settings()
    finally:
        get_settings.cache_clear()
    assert excinfo.value.exit_code == 2
    assert any("penalty_weights" in problem for problem in excinfo.value.details["errors"])


def test_from_settings_prefers_explicit_overrides():
    settings = Settings(_env_file=None, population_size=12, penalty_weights=[9, 3])
    config = SearchConfig.from_settings(
        settings,
        objective={"kind": "proximity", "timeslot_count": 7},
        population_size=None,
        generation_count=5,
    )
    assert config.population_size == 12
    assert config.generation_count == 5
    assert isinstance(config.objective, ProximityObjective)
    assert config.objective.penalty_weights == (9, 3)
    assert not config.minimizes_timeslots


def test_count_objective_config():
    config = build_search_config(objective={"kind": "timeslot_count"})
    assert isinstance(config.objective, TimeslotCountObjective)
    assert config.minimizes_timeslots
    assert config.elite_count == 1


def test_single_member_population_keeps_the_default_elite():
    config = build_search_config(objective={"kind": "timeslot_count"}, population_size=1)
    assert config.elite_count == config.population_size == 1


def test_tournament_may_exceed_population_size():
    config = build_search_config(objective={"kind": "timeslot_count"}, population_size=2, tournament_size=5)
    assert config.tournament_size == 5


@pytest.mark.parametrize(
    "overrides",
    [
        {"population_size": 0},
        {"objective": {"kind": "proximity", "timeslot_count": 0}},
        {"objective": {"kind": "unknown"}},
        {"mutation_probability": 1.5},
        {"elite_count": 11},
        {"population_size": 4, "truncation_size": 6},
        {"max_repair_retries": -1},
    ],
)
def test_invalid_tunables_raise_configuration_error(overrides):
    values = {"objective": {"kind": "timeslot_count"}}
    values.update(overrides)
    with pytest.raises(ConfigurationError) as excinfo:
        build_search_config(**values)
    assert excinfo.value.exit_code == 2
    assert excinfo.value.details["errors"]


def test_configuration_error_names_the_field():
    with pytest.raises(ConfigurationError) as excinfo:
        build_search_config(objective={"kind": "timeslot_count"}, population_size=0)
    assert "population_size" in excinfo.value.message


@pytest.mark.parametrize(
    "values",
    [
        {"exam_count": 0},
        {"exam_count": 3, "enrollments": [[0, 3]]},
        {"exam_count": 3, "enrollments": [[0, "1"]]},
    ],
)
def test_invalid_problems_raise_input_validation_error(values):
    with pytest.raises(InputValidationError):
        build_exam_problem(**values)
