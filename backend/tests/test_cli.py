import pytest

from timetabler import cli
from timetabler.core.config import Settings, get_settings, load_settings


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    monkeypatch.setattr(cli, "load_settings", lambda: Settings(_env_file=None, progress_interval=0))


def test_minimize_timeslots_run_prints_and_writes_solution(carter_dataset, tmp_path, capsys):
    output = tmp_path / "mini.sol"
    exit_code = cli.main(
        [
            str(carter_dataset),
            "--minimize-timeslots",
            "--population-size", "4",
            "--generations", "10",
            "--seed", "3",
            "--output", str(output),
        ]
    )

    assert exit_code == 0
    captured = capsys.readouterr()
    assert "Best solution:" in captured.out
    assert "objective=timeslot_count" in captured.out
    assert "feasible=True" in captured.out
    assert len(output.read_text(encoding="utf-8").splitlines()) == 4


def test_proximity_run_uses_fixed_timeslots(carter_dataset, capsys):
    exit_code = cli.main(
        [
            str(carter_dataset),
            "--timeslots", "3",
            "--population-size", "4",
            "--generations", "5",
            "--selection", "truncation",
            "--first-improvement",
            "--seed", "8",
        ]
    )

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "objective=proximity" in out
    assert "seed=8" in out


def test_invalid_tunables_exit_with_configuration_code(carter_dataset, capsys):
    assert cli.main([str(carter_dataset), "--timeslots", "0"]) == 2
    assert "error:" in capsys.readouterr().err


def test_missing_dataset_exits_with_input_code(tmp_path, capsys):
    assert cli.main([str(tmp_path / "absent"), "--minimize-timeslots"]) == 65
    assert "not found" in capsys.readouterr().err


def test_objective_flag_is_required(carter_dataset):
    with pytest.raises(SystemExit):
        cli.parse_args([str(carter_dataset)])


def test_build_config_maps_flags_onto_settings(carter_dataset):
    args = cli.parse_args([str(carter_dataset), "--timeslots", "6", "--climb-iterations", "9"])
    config = cli.build_config(args, Settings(_env_file=None, population_size=14))
    assert config.population_size == 14
    assert config.hill_climb_iterations == 9
    assert config.objective.timeslot_count == 6
    assert config.hill_climb_first_improvement is False


@pytest.mark.parametrize(
    ("name", "value"),
    [("TIMETABLER_POPULATION_SIZE", "ten"), ("TIMETABLER_PENALTY_WEIGHTS", "32,x")],
)
def test_bad_environment_tunable_exits_with_configuration_code(
    carter_dataset, monkeypatch, capsys, name, value
):
    monkeypatch.setattr(cli, "load_settings", load_settings)
    monkeypatch.setenv(name, value)
    get_settings.cache_clear()
    try:
        assert cli.main([str(carter_dataset), "--minimize-timeslots"]) == 2
    finally:
        get_settings.cache_clear()
    assert "Invalid settings" in capsys.readouterr().err
