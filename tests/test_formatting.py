import pytest

from sparkpulse.core.formatting import (
    calculate_percentage,
    human_file_size,
    human_file_size_spark_config_format,
    parse_spark_memory,
)


@pytest.mark.parametrize(
    ("num_bytes", "expected"),
    [
        (0, "0 B"),
        (1023, "1023 B"),
        (1024, "1.00 KB"),
        (1536, "1.50 KB"),
        (512 * 1024 * 1024, "512.00 MB"),
        (3 * 1024**3, "3.00 GB"),
    ],
)
def test_human_file_size_uses_binary_units(num_bytes: int, expected: str):
    assert human_file_size(num_bytes) == expected


def test_spark_config_format_whole_gibibytes():
    assert human_file_size_spark_config_format(4 * 1024**3) == "4g"


def test_spark_config_format_rounds_up_to_mebibytes():
    assert human_file_size_spark_config_format(4 * 1024**3 * 1.2) == "4916m"
    assert human_file_size_spark_config_format(512 * 1024**2) == "512m"


def test_spark_config_format_small_values_use_kibibytes():
    assert human_file_size_spark_config_format(1500) == "2k"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("4g", 4 * 1024**3),
        ("512m", 512 * 1024**2),
        ("2048", 2048 * 1024**2),
        ("1t", 1024**4),
        (" 8GB ", 8 * 1024**3),
        ("100b", 100),
    ],
)
def test_parse_spark_memory(value: str, expected: int):
    assert parse_spark_memory(value) == expected


@pytest.mark.parametrize("value", ["", "lots", "4x", "g4"])
def test_parse_spark_memory_rejects_invalid_values(value: str):
    with pytest.raises(ValueError, match="Invalid Spark memory"):
        parse_spark_memory(value)


def test_spark_config_format_round_trips_through_parser():
    assert parse_spark_memory(human_file_size_spark_config_format(6 * 1024**3)) == 6 * 1024**3


def test_calculate_percentage_handles_zero_total():
    assert calculate_percentage(10, 0) == 0.0
    assert calculate_percentage(25, 200) == 12.5
