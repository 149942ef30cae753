import pytest

from plugins.equation_plotter.core import (
    DimensionMismatchError,
    MalformedUnitError,
    PintUnitBackend,
    UnitConversionError,
    UnitNotFoundError,
    convert_inverse_units,
    extract_tagged_strings,
    get_units_scaling_ratio,
    remove_tagged_strings,
    return_custom_units_markup,
    scale_dataseries_dict,
    scale_fig_dict_values,
    scale_figure,
    separate_label_text_from_units,
    tag_micro_units,
    untag_micro_units,
)
from plugins.equation_plotter.core.unit_text import MICRO_SYMBOLS, micro_tag_suffix


@pytest.fixture()
def backend():
    return PintUnitBackend()


class SlashlessBackend:
    """Backend that only understands reciprocals written as ``(X)**(-1)``."""

    def __init__(self, result=1e-5, accept_rewritten=True):
        self.result = result
        self.accept_rewritten = accept_rewritten
        self.calls = []

    def register_custom_unit(self, token, *, micro_of=None):
        pass

    def ratio(self, source, target):
        self.calls.append((source, target))
        if "1/" in source + target or not self.accept_rewritten:
            raise MalformedUnitError("unsupported syntax", original=(source, target), processed=(source, target))
        return self.result


def test_tag_micro_units_uses_placeholders():
    assert tag_micro_units("µm/s") == "<microfrogm>/s"
    assert tag_micro_units("µm*µmol") == "<microfrogm>*<microfrogmol>"
    assert tag_micro_units("kg/s") == "kg/s"


@pytest.mark.parametrize("symbol", sorted(MICRO_SYMBOLS))
def test_untag_restores_every_micro_glyph(symbol):
    text = f"{symbol}m/{symbol}s"
    assert untag_micro_units(tag_micro_units(text)) == text


def test_micro_tag_suffix():
    assert micro_tag_suffix("microfrogm") == "m"
    assert micro_tag_suffix("frog") is None


def test_extract_and_remove_tagged_strings():
    text = "<microfrogm>/<frog>*<frog>"
    assert extract_tagged_strings(text) == ["microfrogm", "frog"]
    assert remove_tagged_strings(text) == "microfrogm/frog*frog"


def test_custom_units_markup_matches_whole_tokens():
    assert return_custom_units_markup("frogs*frog/s", ["frog"]) == "frogs*<frog>/s"
    assert return_custom_units_markup("<frog>/s", ["frog"]) == "<frog>/s"
    assert return_custom_units_markup("kg/frogday", ["frog", "frogday"]) == "kg/<frogday>"


def test_convert_inverse_units():
    assert convert_inverse_units("1/bar") == "(bar)**(-1)"
    assert convert_inverse_units("1/(1/bar)") == "((bar)**(-1))**(-1)"
    assert convert_inverse_units("m/s") == "m/s"


def test_separate_label_text_from_units():
    assert separate_label_text_from_units("T (K)") == ("T", "K")
    assert separate_label_text_from_units("Cp (J/(mol*K))") == ("Cp", "J/(mol*K)")
    assert separate_label_text_from_units("T") == ("T", "")
    assert separate_label_text_from_units(None) == ("", "")


def test_identical_units_short_circuit(backend):
    assert get_units_scaling_ratio("not a unit", "not a unit", backend=backend) == 1.0


def test_ratio_between_known_units(backend):
    assert get_units_scaling_ratio("kg", "g", backend=backend) == pytest.approx(1000)
    assert get_units_scaling_ratio("g", "kg", backend=backend) == pytest.approx(0.001)
    assert get_units_scaling_ratio("m^2", "cm^2", backend=backend) == pytest.approx(1e4)


def test_reciprocal_units(backend):
    assert get_units_scaling_ratio("1/bar", "1/Pa", backend=backend) == pytest.approx(1e-5)


def test_micro_units_scale_against_base_unit(backend):
    assert get_units_scaling_ratio("µm", "m", backend=backend) == pytest.approx(1e-6)
    assert get_units_scaling_ratio("μm", "µm", backend=backend) == pytest.approx(1.0)


def test_custom_units_are_registered_once(backend):
    ratio = get_units_scaling_ratio("<frog>/s", "<frog>/min", backend=backend)
    assert ratio == pytest.approx(60)
    assert backend.custom_units == ("frog",)
    backend.register_custom_unit("frog")
    assert backend.custom_units == ("frog",)


def test_dimension_mismatch_reports_both_strings(backend):
    with pytest.raises(DimensionMismatchError) as excinfo:
        get_units_scaling_ratio("kg", "m", backend=backend)
    assert excinfo.value.original == ("kg", "m")
    assert "Unit 1: 'kg'" in str(excinfo.value)
    assert "Processed Unit 2" in str(excinfo.value)


def test_unknown_unit_is_reported(backend):
    with pytest.raises(UnitNotFoundError):
        get_units_scaling_ratio("bogusunit", "m", backend=backend)
    assert issubclass(UnitNotFoundError, UnitConversionError)


def test_scale_dataseries_in_place_and_keeps_gaps():
    original_x = [1, 2]
    series = {"name": "k", "x": original_x, "y": [3, None]}
    result = scale_dataseries_dict(series, 1, 10)
    assert result is series
    assert series["x"] is original_x
    assert series["y"] == [30.0, None]


def test_scale_dataseries_z_axis():
    series = scale_dataseries_dict({"x": [1], "y": [1], "z": [2]}, 1, 1, 0.5)
    assert series["z"] == [1.0]


def test_scale_fig_dict_values_returns_copy():
    figure = {"data": [{"x": [1, 2], "y": [2, 4]}], "layout": {"title": "rates"}}
    scaled = scale_fig_dict_values(figure, 2, 3)
    assert scaled["data"][0] == {"x": [2.0, 4.0], "y": [6.0, 12.0]}
    assert scaled["layout"] == {"title": "rates"}
    assert figure["data"][0] == {"x": [1, 2], "y": [2, 4]}


def test_scale_figure_derives_factors_from_units():
    result = scale_figure({"data": [{"x": [1.5], "y": [2]}]}, x_units=("kg", "g"), y_factor=2)
    assert result["x_factor"] == pytest.approx(1000)
    assert result["y_factor"] == 2
    assert result["figure"]["data"][0]["x"] == [pytest.approx(1500)]
    assert result["figure"]["data"][0]["y"] == [4.0]


def test_inverse_units_are_rewritten_before_the_retry():
    slashless = SlashlessBackend()
    assert get_units_scaling_ratio("1/bar", "1/Pa", backend=slashless) == 1e-5
    assert slashless.calls == [("1/bar", "1/Pa"), ("(bar)**(-1)", "(Pa)**(-1)")]


def test_failed_retry_reports_rewritten_units():
    slashless = SlashlessBackend(accept_rewritten=False)
    with pytest.raises(MalformedUnitError) as excinfo:
        get_units_scaling_ratio("1/bar", "1/Pa", backend=slashless)
    assert len(slashless.calls) == 2
    assert excinfo.value.original == ("1/bar", "1/Pa")
    assert excinfo.value.processed == ("(bar)**(-1)", "(Pa)**(-1)")
    assert "Processed Unit 1: '(bar)**(-1)'" in str(excinfo.value)


def test_unregistrable_custom_unit_reports_caller_strings(backend):
    with pytest.raises(UnitConversionError) as excinfo:
        get_units_scaling_ratio("<my unit>/s", "m/s", backend=backend)
    assert excinfo.value.original == ("<my unit>/s", "m/s")
    assert "Unit 1: '<my unit>/s', Unit 2: 'm/s'" in str(excinfo.value)
