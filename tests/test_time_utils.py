import pytest

from frame_sampler.exceptions import FrameSamplerError
from frame_sampler.utils.time_utils import format_timestamp, parse_time_value


@pytest.mark.parametrize(
    "value, expected",
    [
        ("1.5", 1.5),
        ("1,5", 1.5),
        ("2s", 2.0),
        ("200ms", 0.2),
        ("00:01:05.250", 65.25),
        ("01:00:00", 3600.0),
    ],
)
def test_parse_time_value(value, expected):
    assert parse_time_value(value) == pytest.approx(expected)


def test_parse_time_value_zero():
    assert parse_time_value("0", allow_zero=True) == 0.0
    with pytest.raises(FrameSamplerError):
        parse_time_value("0")


@pytest.mark.parametrize("value", ["", "abc", "ms", "1:2", "00:61:00", "00:00:75", "-1"])
def test_parse_time_value_rejects(value):
    with pytest.raises(FrameSamplerError):
        parse_time_value(value)


def test_format_timestamp():
    assert format_timestamp(65.25) == "01:05.250"
    assert format_timestamp(3661.5) == "01:01:01.500"
