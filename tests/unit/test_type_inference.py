import pytest

from xmlgraph.ingestion.type_inference import infer_type
from xmlgraph.shared.models import DataType


@pytest.mark.parametrize(
    "value,expected",
    [
        ("42", DataType.INTEGER),
        ("0", DataType.INTEGER),
        ("3.14", DataType.FLOAT),
        ("true", DataType.BOOLEAN),
        ("FALSE", DataType.BOOLEAN),
        ("True", DataType.BOOLEAN),
        ("2023-01-15", DataType.DATETIME),
        ("2023-01-15T10:00:00Z", DataType.DATETIME),
        ("14:30:00", DataType.DATETIME),
        ("", DataType.STRING),
        ("hello", DataType.STRING),
    ],
)
def test_infer_type_examples(value, expected):
    assert infer_type(value) == expected


def test_none_is_string():
    assert infer_type(None) == DataType.STRING


def test_signed_and_localized_numbers_are_strings():
    # No sign or locale handling
    assert infer_type("-5") == DataType.STRING
    assert infer_type("1,5") == DataType.STRING
    assert infer_type("3.") == DataType.STRING


@pytest.mark.parametrize("value", ["٤٢", "٣.١٤", "٢٠٢٣-٠١-١٥", "١٤:٣٠:٠٠", "４２"])
def test_non_ascii_digits_are_strings(value):
    assert infer_type(value) == DataType.STRING


def test_data_type_values_are_stored_strings():
    assert [t.value for t in DataType] == [
        "string",
        "integer",
        "float",
        "boolean",
        "datetime",
    ]
