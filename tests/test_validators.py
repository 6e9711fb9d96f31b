import pytest

from oicp.shared.validators import one_field_must_be_set, validate_cardinality


def test_validate_cardinality():
    assert validate_cardinality("EvseID", ["a"], 1, 2)
    assert validate_cardinality("EvseID", ["a", "b"], 1, 2)

    with pytest.raises(ValueError):
        validate_cardinality("EvseID", ["a", "b", "c"], 1, 2)

    with pytest.raises(ValueError):
        validate_cardinality("EvseID", [], 1, 2)

    with pytest.raises(ValueError):
        validate_cardinality("EvseID", None, 1, 2)


def test_one_field_must_be_set():
    fields_to_test = ["pin", "hashed_pin"]

    just_one_set = {"pin": "1234"}

    assert one_field_must_be_set(fields_to_test, just_one_set, True)

    with pytest.raises(ValueError):
        two_values_set = {"pin": "1234", "hashed_pin": "abcd"}
        assert one_field_must_be_set(fields_to_test, two_values_set, True)

    with pytest.raises(ValueError):
        no_values_set = {"no_accepted_value": 1234}
        assert one_field_must_be_set(fields_to_test, no_values_set, True)


def test_zero_counts_as_set():
    assert one_field_must_be_set(["a", "b"], {"a": 0})
