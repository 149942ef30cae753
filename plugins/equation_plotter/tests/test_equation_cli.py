import json

import pytest

from plugins.equation_plotter.cli import build_parser, main


def _write_record(path, **overrides):
    record = {
        "equation_string": "y = 2*x + b",
        "x_variable": "x (m)",
        "y_variable": "y (m)",
        "constants": {"b": "1 m"},
        "num_of_points": 3,
        "x_range_default": [0, 1],
    }
    record.update(overrides)
    path.write_text(json.dumps(record), encoding="utf-8")
    return path


def test_parser_requires_a_command():
    parser = build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args([])


def test_evaluate_prints_record(tmp_path, capsys):
    path = _write_record(tmp_path / "line.json")
    main(["evaluate", str(path)])
    output = json.loads(capsys.readouterr().out)
    assert output["x_points"] == [0.0, 0.5, 1.0]
    assert output["y_points"] == [1.0, 2.0, 3.0]
    assert output["equation_string"] == "y = 2*x + b"


def test_evaluate_strip_inputs(tmp_path, capsys):
    path = _write_record(tmp_path / "line.json")
    main(["evaluate", str(path), "--strip-inputs"])
    output = json.loads(capsys.readouterr().out)
    assert set(output) == {"x_units", "y_units", "x_points", "y_points"}


def test_evaluate_writes_output_file(tmp_path, capsys):
    path = _write_record(tmp_path / "line.json")
    main(["evaluate", str(path), "--output", str(tmp_path / "evaluated")])
    summary = json.loads(capsys.readouterr().out)
    written = tmp_path / "evaluated.json"
    assert summary == {"written": str(written), "failed_samples": 0}
    assert json.loads(written.read_text(encoding="utf-8"))["y_units"] == "m"


def test_evaluate_rejects_invalid_record(tmp_path):
    path = _write_record(tmp_path / "bad.json", num_of_points=0)
    with pytest.raises(SystemExit) as excinfo:
        main(["evaluate", str(path)])
    assert "Invalid equation record" in str(excinfo.value)


def test_ratio_command(capsys):
    main(["ratio", "kg", "g"])
    output = json.loads(capsys.readouterr().out)
    assert output["ratio"] == pytest.approx(1000)


def test_ratio_command_reports_failures():
    with pytest.raises(SystemExit) as excinfo:
        main(["ratio", "kg", "m"])
    assert "not compatible" in str(excinfo.value)
