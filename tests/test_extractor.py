# tests/test_extractor.py
"""
Extractor Tests - Unit Tests for Response Path Extraction

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- chainprobe.shared.extractor (extract, parse_path, to_base_units)
"""
import pytest  # Testing framework for writing and running tests

from chainprobe.domain.errors import MalformedResponseError
from chainprobe.shared.extractor import ABSENT, extract, parse_path, to_base_units


class TestParsePath:
    def test_dotted_with_index(self):
        assert parse_path("data[0].balance") == ["data", 0, "balance"]

    def test_nested_indices(self):
        assert parse_path("rows[1][2].v") == ["rows", 1, 2, "v"]

    def test_empty_path(self):
        assert parse_path("") == []

    def test_invalid_index(self):
        with pytest.raises(ValueError, match="Invalid response path segment"):
            parse_path("data[x].balance")


class TestExtract:
    def test_indexed_balance(self):
        body = {"data": [{"balance": "500"}]}
        assert extract(body, "data[0].balance") == "500"

    def test_out_of_range_index_is_absent(self):
        body = {"data": [{"balance": "500"}]}
        assert extract(body, "data[1].balance") is ABSENT

    def test_missing_intermediate_is_absent(self):
        assert extract({"result": {}}, "result.value.amount") is ABSENT
        assert extract({}, "data[0].balance") is ABSENT

    def test_stepping_into_scalar_is_absent(self):
        assert extract({"result": "12"}, "result.value") is ABSENT
        assert extract("plain text", "result") is ABSENT

    def test_null_value_is_absent(self):
        assert extract({"result": None}, "result") is ABSENT

    def test_none_path_returns_body(self):
        assert extract("1234", None) == "1234"

    def test_zero_is_present(self):
        assert extract({"result": 0}, "result") == 0

    def test_absent_is_falsy_singleton(self):
        assert not ABSENT
        assert repr(ABSENT) == "ABSENT"


class TestToBaseUnits:
    def test_numeric_string(self):
        assert to_base_units("500") == 500
        assert to_base_units(" 42 ") == 42

    def test_large_wei_keeps_precision(self):
        wei = "123456789012345678901234567890"
        assert to_base_units(wei) == 123456789012345678901234567890

    def test_int_and_integral_float(self):
        assert to_base_units(7) == 7
        assert to_base_units(1500.0) == 1500

    def test_hex_quantity(self):
        assert to_base_units("0x1bc16d674ec80000") == 2 * 10**18

    def test_exponent_string(self):
        assert to_base_units("1.2e3") == 1200

    @pytest.mark.parametrize("value", ["abc", "", "12.5", "-3", True, 1.5, [1], {"a": 1}, "0xzz", "NaN"])
    def test_malformed_values(self, value):
        with pytest.raises(MalformedResponseError):
            to_base_units(value)
