import json
import math

import numpy as np
import pytest

from plugins.equation_plotter.core import (
    ConstantFormatError,
    EquationRecord,
    EquationValidationError,
    EvaluationError,
    PointsSpacing,
    SamplingError,
    UnsupportedEquationError,
    assemble_grid,
    dumps,
    evaluate_expression,
    evaluate_record,
    export_to_json_file,
    load_settings,
    loads,
    matrix_to_lists,
    parse_constant,
    record_from_dict,
    record_to_dataseries,
    record_to_dict,
    sample_axis,
    solve_equation,
    validate_constant_value,
)


def _arrhenius() -> dict:
    return {
        "equation_string": "k = A * (e ** (-Ea / (R * T)))",
        "x_variable": "T (K)",
        "y_variable": "k (s**-1)",
        "constants": {
            "Ea": "30000 J/mol",
            "R": "8.314 J/(mol*K)",
            "A": "1*10**13 (s**-1)",
            "e": "2.71828",
        },
        "num_of_points": 10,
        "x_range_default": [200, 500],
        "x_range_limits": [None, 600],
        "x_points_specified": [300],
        "points_spacing": "Linear",
        "reverse_scaling": False,
    }


def _surface(**overrides) -> dict:
    data = {
        "equation_string": "z = x + 10*y",
        "x_variable": "x (m)",
        "y_variable": "y (m)",
        "z_variable": "z (m)",
        "x_points_specified": [1, 2],
        "y_points_specified": [0, 1],
        "graphical_dimensionality": 3,
    }
    data.update(overrides)
    return data


def test_sample_axis_linear_and_reverse():
    assert sample_axis([0, 1], 3) == [0.0, 0.5, 1.0]
    assert sample_axis([0, 1], 3, reverse=True) == [1.0, 0.5, 0.0]


def test_sample_axis_defaults_to_ten_points():
    assert len(sample_axis([0, 9])) == 10


def test_sample_axis_logarithmic():
    samples = sample_axis([1, 100], 3, "Logarithmic")
    assert samples == pytest.approx([1.0, 10.0, 100.0])


def test_sample_axis_logarithmic_rejects_non_positive_bounds():
    with pytest.raises(SamplingError):
        sample_axis([0, 10], 5, PointsSpacing.LOGARITHMIC)


def test_sample_axis_specified_points_win_and_respect_limits():
    assert sample_axis([0, 1], 5, points_specified=[3, 4]) == [3.0, 4.0]
    with pytest.raises(SamplingError):
        sample_axis([0, 1], 3, limits=[None, 0.5])


def test_points_spacing_parse():
    assert PointsSpacing.parse("") is PointsSpacing.LINEAR
    assert PointsSpacing.parse("log") is PointsSpacing.LOGARITHMIC
    with pytest.raises(SamplingError):
        PointsSpacing.parse("Cubic")


def test_assemble_grid_sequential_layout():
    unique_x, unique_y, matrix = assemble_grid([1, 1, 2, 2], [10, 20, 10, 20], [1, 2, 3, 4])
    assert unique_x == [1, 2]
    assert unique_y == [10, 20]
    assert matrix[1, 1] == 4
    assert matrix.tolist() == [[1.0, 2.0], [3.0, 4.0]]


def test_assemble_grid_paired_lookup_keeps_last_and_leaves_gaps():
    _, _, matrix = assemble_grid([1, 2, 1], [1, 2, 1], [7, 8, 9], sequential=False)
    assert matrix_to_lists(matrix) == [[9.0, None], [None, 8.0]]


def test_expression_evaluator_is_restricted():
    assert evaluate_expression("2^3") == 8.0
    assert evaluate_expression("sqrt(x) + pi", {"x": 4}) == pytest.approx(2 + math.pi)
    with pytest.raises(EvaluationError):
        evaluate_expression("__import__('os')")
    with pytest.raises(EvaluationError):
        evaluate_expression("x.real", {"x": 1})
    with pytest.raises(EvaluationError):
        evaluate_expression("1/0")


def test_constant_validator():
    assert validate_constant_value("9.8 m/s**2") == "9.8 m/s**2"
    assert validate_constant_value(42) == "42"
    for bad in ("abc", "", ".5", True, None):
        with pytest.raises(ConstantFormatError):
            validate_constant_value(bad)


def test_parse_constant_splits_magnitude_and_unit():
    assert parse_constant("8.314 J/(mol*K)") == (pytest.approx(8.314), "J/(mol*K)")
    assert parse_constant("1*10**13 (s**-1)") == (pytest.approx(1e13), "s**-1")
    assert parse_constant("9.8m") == (pytest.approx(9.8), "m")


def test_add_constants_is_atomic():
    record = EquationRecord()
    record.add_constants({"a": "1"})
    with pytest.raises(ConstantFormatError):
        record.add_constants([{"b": "2"}, {"c": "oops"}])
    assert record.constants == {"a": "1"}
    with pytest.raises(EquationValidationError):
        record.add_constants("a=1")


def test_setters_validate_before_mutating():
    record = EquationRecord()
    with pytest.raises(EquationValidationError):
        record.set_num_of_points(0)
    with pytest.raises(EquationValidationError):
        record.set_graphical_dimensionality(4)
    with pytest.raises(EquationValidationError):
        record.set_x_range_default([1])
    with pytest.raises(EquationValidationError):
        record.set_x_range_limits([0, "high"])
    assert record.num_of_points is None
    assert record.x_range_default == [0.0, 1.0]


def test_arrhenius_example_evaluates_single_point():
    record = record_from_dict(_arrhenius())
    record.evaluate()
    expected = 1e13 * 2.71828 ** (-30000 / (8.314 * 300))
    assert record.x_points == [300.0]
    assert record.y_points == [pytest.approx(expected, rel=1e-9)]
    assert record.x_units == "K"
    assert record.y_units == "s**-1"
    assert record.diagnostics == []


def test_evaluation_is_idempotent_and_keeps_inputs():
    record = record_from_dict(_arrhenius())
    first = list(record.evaluate().y_points)
    second = list(record.evaluate().y_points)
    assert first == second
    assert record.equation_string == "k = A * (e ** (-Ea / (R * T)))"


def test_dependent_falls_back_to_equation_left_side():
    record = record_from_dict({"equation_string": "y = 2*x", "x_variable": "x", "x_points_specified": [1, 2]})
    record.evaluate()
    assert record.y_points == [2.0, 4.0]
    assert record.y_units == ""


def test_unsupported_equation_is_rejected():
    data = _arrhenius()
    data["equation_string"] = "2*k = A*T"
    with pytest.raises(UnsupportedEquationError):
        record_from_dict(data).evaluate()
    with pytest.raises(UnsupportedEquationError):
        solve_equation("k + 1 = T", {"T": 1.0}, "k")


def test_failed_samples_become_none_with_diagnostics():
    record = record_from_dict({"equation_string": "y = 1/x", "x_variable": "x", "x_points_specified": [0, 1, 2]})
    record.evaluate()
    assert record.y_points == [None, 1.0, 0.5]
    assert len(record.diagnostics) == 1
    assert record.diagnostics[0].index == 0
    assert record.diagnostics[0].point == {"x": 0.0}


def test_sampled_values_outside_limits_fail():
    data = _arrhenius()
    data["x_points_specified"] = [300, 700]
    with pytest.raises(SamplingError):
        record_from_dict(data).evaluate()


def test_point_budget_is_enforced():
    record = record_from_dict({"equation_string": "y = x", "x_variable": "x", "num_of_points": 20})
    with pytest.raises(SamplingError):
        record.evaluate(max_points=5)


def test_three_dimensional_record_builds_cross_product():
    record = record_from_dict(_surface())
    record.evaluate()
    assert record.x_points == [1.0, 1.0, 2.0, 2.0]
    assert record.y_points == [0.0, 1.0, 0.0, 1.0]
    assert record.z_points == [1.0, 11.0, 2.0, 12.0]
    assert record.z_units == "m"
    assert record.get_z_matrix().tolist() == [[1.0, 11.0], [2.0, 12.0]]


def test_reversed_three_dimensional_record_keeps_matrix_orientation():
    record = record_from_dict(_surface(reverse_scaling=True))
    record.evaluate()
    assert record.x_points == [2.0, 2.0, 1.0, 1.0]
    assert record.get_z_matrix().tolist() == [[1.0, 11.0], [2.0, 12.0]]


def test_three_dimensional_record_requires_z_variable():
    data = _surface()
    del data["z_variable"]
    with pytest.raises(EquationValidationError):
        record_from_dict(data).evaluate()


def test_strip_inputs_keeps_only_outputs():
    record = record_from_dict(_arrhenius())
    record.evaluate(strip_inputs=True)
    assert set(record_to_dict(record)) == {"x_units", "y_units", "x_points", "y_points"}
    assert record.equation_string == ""
    with pytest.raises(EquationValidationError):
        record.evaluate()


def test_extra_fields_survive_round_trip():
    record = record_from_dict({"equation_string": "y = 2*x", "x_variable": "x", "comments": "calibration"})
    restored = loads(dumps(record))
    assert restored.extra_fields == {"comments": "calibration"}
    assert restored.equation_string == "y = 2*x"


def test_record_from_dict_rejects_non_mappings():
    with pytest.raises(EquationValidationError):
        record_from_dict([1, 2])
    with pytest.raises(EquationValidationError):
        loads("{not json")


def test_record_to_dataseries_names_the_dependent_variable():
    record = record_from_dict(_arrhenius())
    with pytest.raises(EquationValidationError):
        record_to_dataseries(record)
    series = record_to_dataseries(record.evaluate())
    assert series["name"] == "k"
    assert series["x"] == [300.0]


def test_export_appends_json_suffix(tmp_path):
    record = record_from_dict(_arrhenius())
    path = export_to_json_file(record, tmp_path / "arrhenius")
    assert path.name == "arrhenius.json"
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["x_points"] == [300.0]
    assert data["constants"]["Ea"] == "30000 J/mol"


def test_evaluate_record_reports_grid_for_surfaces():
    result = evaluate_record(_surface(), strip_inputs=True)
    assert set(result["record"]) == {"x_units", "y_units", "x_points", "y_points", "z_units", "z_points"}
    assert result["grid"] == {"x": [1.0, 2.0], "y": [0.0, 1.0], "z": [[1.0, 11.0], [2.0, 12.0]]}
    assert result["diagnostics"] == []


def test_get_z_matrix_accepts_explicit_points():
    matrix = EquationRecord(graphical_dimensionality=3).get_z_matrix([1, 1, 2, 2], [10, 20, 10, 20], [1, 2, 3, None])
    assert matrix[0, 1] == 2
    assert np.isnan(matrix[1, 1])


def test_load_settings_falls_back_to_defaults():
    settings = load_settings({"max_points": "lots", "inverse_units_depth": 5})
    assert settings.max_points == 10000
    assert settings.inverse_units_depth == 5
    assert load_settings(None).max_points == 10000


def test_to_json_can_evaluate_and_project():
    record = record_from_dict(_arrhenius())
    assert "x_points" not in json.loads(record.to_json())
    projected = json.loads(record.to_json(evaluate=True, strip_inputs=True))
    assert projected == record.output_projection()
    assert projected["x_units"] == "K"


def test_deeply_nested_expression_fails_per_sample():
    record = record_from_dict(
        {"equation_string": "y = " + "-" * 1000 + "x", "x_variable": "x", "x_points_specified": [1, 2]}
    )
    record.evaluate()
    assert record.y_points == [None, None]
    assert len(record.diagnostics) == 2
    with pytest.raises(EvaluationError):
        evaluate_expression("-" * 1000 + "x", {"x": 1})


@pytest.mark.parametrize("value", ["9**9**9", "1e400", "2*/3 m"])
def test_parse_constant_rejects_unevaluable_magnitudes(value):
    with pytest.raises(ConstantFormatError):
        parse_constant(value)


def test_switching_to_two_dimensions_clears_z_outputs():
    record = record_from_dict(_surface())
    record.evaluate()
    assert record.z_points is not None
    record.set_equation("y = 2*x")
    record.set_graphical_dimensionality(2)
    record.evaluate()
    assert record.z_points is None
    assert record.z_units is None
    payload = record_to_dict(record)
    assert "z_points" not in payload
    assert "z_units" not in payload
