import pytest

from shared.validators import parse_int_list


class TestParseIntList:
    def test_json_array_string(self):
        assert parse_int_list("[20, 10, -10, -20]") == [20, 10, -10, -20]

    def test_comma_separated_string(self):
        assert parse_int_list("30,10,-10,-30") == [30, 10, -10, -30]

    def test_comma_separated_with_whitespace(self):
        assert parse_int_list(" 15 , 5 , -5 , -15 ") == [15, 5, -5, -15]

    def test_passthrough_tuple(self):
        assert parse_int_list((20, 10, -10, -20)) == [20, 10, -10, -20]

    def test_length_enforced(self):
        with pytest.raises(ValueError, match="Expected 4 integers, got 3"):
            parse_int_list("10,0,-10", length=4)

    def test_empty_string_raises(self):
        with pytest.raises(ValueError, match="must not be empty"):
            parse_int_list("  ")

    def test_empty_json_array_raises(self):
        with pytest.raises(ValueError, match="must not be empty"):
            parse_int_list("[]")

    def test_invalid_json_raises(self):
        with pytest.raises(ValueError, match="Invalid JSON array"):
            parse_int_list("[20, 10,")

    def test_json_object_raises(self):
        with pytest.raises(ValueError, match="must be an array of integers"):
            parse_int_list('{"first": 20}')

    def test_malformed_json_object_raises(self):
        with pytest.raises(ValueError, match="Invalid JSON"):
            parse_int_list('{"first": 20')

    def test_non_integer_csv_raises(self):
        with pytest.raises(ValueError, match="Invalid integer list"):
            parse_int_list("20,ten,-10,-20")

    def test_json_floats_and_bools_raise(self):
        with pytest.raises(ValueError, match="only integers"):
            parse_int_list("[20.5, 10, -10, -20]")
        with pytest.raises(ValueError, match="only integers"):
            parse_int_list([True, 0, 0, -1])
