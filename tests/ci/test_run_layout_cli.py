"""Tests for the run_layout CLI."""

import json

import yaml

from geartrain.cli import run_layout_main


def _write(path, data):
    path.write_text(yaml.safe_dump(data))
    return path


def test_prints_gear_states(tmp_path, capsys):
    """The CLI prints gear states and a passing check as JSON."""
    layout = _write(
        tmp_path / "layout.yml",
        {
            "gears": [{"name": "a", "teeth": 30}, {"name": "b", "teeth": 60}],
            "mesh": [["a", "b"]],
            "drives": [{"gear": "a", "frequency": 1.0}, {"gear": "a", "torque": 10.0}],
        },
    )

    code = run_layout_main(["--layout", str(layout), "--check"])

    out = json.loads(capsys.readouterr().out)
    assert code == 0
    assert out["gears"]["b"]["frequency"] == -0.5
    assert out["gears"]["b"]["torque"] == -20.0
    assert out["refused"] == []
    assert out["invariants"]["is_consistent"] is True


def test_refused_connection_sets_exit_code(tmp_path, capsys):
    """A refused connection is listed by name and exits 1."""
    layout = _write(
        tmp_path / "layout.yml",
        {
            "gears": [{"name": "a", "teeth": 30}, {"name": "b", "teeth": 60}],
            "axes": [["a", "b"]],
            "mesh": [["a", "b"]],
        },
    )

    code = run_layout_main(["--layout", str(layout)])

    captured = capsys.readouterr()
    out = json.loads(captured.out)
    assert code == 1
    assert out["refused"] == [{"relation": "axial", "a": "a", "b": "b", "reason": "already_meshed"}]
    assert "connection refused" in captured.err


def test_inconsistent_loop_fails_check(tmp_path, capsys):
    """An unsatisfiable loop fails --check."""
    layout = _write(
        tmp_path / "layout.yml",
        {
            "gears": [{"name": n, "teeth": t} for n, t in (("a", 10), ("b", 20), ("c", 40))],
            "mesh": [["a", "b"], ["b", "c"], ["c", "a"]],
            "drives": [{"gear": "a", "frequency": 1.0}],
        },
    )
    config = _write(tmp_path / "cfg.yml", {"network": {"check_rtol": 1e-6}})

    code = run_layout_main(["--layout", str(layout), "--config", str(config), "--check"])

    out = json.loads(capsys.readouterr().out)
    assert code == 1
    assert out["invariants"]["is_consistent"] is False


def test_debug_logging_goes_to_stderr(tmp_path, capsys):
    """Debug logs go to stderr and leave stdout parseable."""
    layout = _write(tmp_path / "layout.yml", {"gears": [{"name": "a", "teeth": 30}]})

    code = run_layout_main(["--layout", str(layout), "--log-level", "DEBUG"])

    captured = capsys.readouterr()
    assert code == 0
    assert json.loads(captured.out)["gears"]["a"]["period"] is None
    assert "build_layout completed" in captured.err


def test_infinite_drive_prints_valid_json(tmp_path, capsys):
    """Non-finite states are reported as null so stdout stays strict JSON."""
    layout = _write(
        tmp_path / "layout.yml",
        {
            "gears": [{"name": "a", "teeth": 30}, {"name": "b", "teeth": 60}],
            "mesh": [["a", "b"]],
            "drives": [{"gear": "a", "frequency": float("inf")}],
        },
    )

    code = run_layout_main(["--layout", str(layout), "--check"])

    text = capsys.readouterr().out
    assert "Infinity" not in text and "NaN" not in text
    out = json.loads(text)
    assert code == 1
    assert out["gears"]["a"]["frequency"] is None
    assert out["gears"]["b"]["frequency"] is None
    assert out["invariants"]["is_consistent"] is False
    assert out["invariants"]["max_residual"] is None
