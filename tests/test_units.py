"""
Tests for unit conversions and comfort metrics.
"""

import pytest

from meteoviveiro.units import (
    apparent_temperature,
    convert_wind_speed,
    format_wind_speed,
    kmh_to_ms,
    ms_to_kmh,
    wind_direction_name,
    wind_direction_with_degrees,
)


class TestWindSpeed:
    """Test m/s <-> km/h conversion."""

    def test_ms_to_kmh(self):
        assert ms_to_kmh(10) == pytest.approx(36.0)
        assert ms_to_kmh(0) == 0

    def test_conversion_is_reversible(self):
        for value in [0.0, 0.1, 2.5, 13.7, 42.0]:
            assert kmh_to_ms(ms_to_kmh(value)) == pytest.approx(value)

    def test_convert_wind_speed_code_in_ms(self):
        value, unit = convert_wind_speed("VV_AVG_10m", 5.0, "m/s")
        assert value == pytest.approx(18.0)
        assert unit == "km/h"

    def test_convert_wind_speed_leaves_other_codes(self):
        assert convert_wind_speed("TA_AVG_1.5m", 5.0, "m/s") == (5.0, "m/s")
        assert convert_wind_speed("VV_RACHA_10m", 20.0, "km/h") == (20.0, "km/h")

    def test_convert_wind_speed_null_value(self):
        assert convert_wind_speed("VV_AVG_2m", None, "m/s") == (None, "km/h")

    def test_format_wind_speed(self):
        assert format_wind_speed(5) == "18"
        assert format_wind_speed(5, decimals=1) == "18.0"


class TestApparentTemperature:
    """Test the feels-like temperature formula."""

    def test_wind_chill_boundary_is_exclusive(self):
        assert apparent_temperature(10, 4.8) == 10

    @pytest.mark.parametrize(
        "temp_c, wind_kmh, unchanged",
        [
            (10, 4.8, True),
            (10, 4.9, False),
            (5, 4.8, True),
            (20, 3.6, True),
            (20, 3.7, False),
        ],
    )
    def test_wind_thresholds(self, temp_c, wind_kmh, unchanged):
        result = apparent_temperature(temp_c, wind_kmh)
        assert (result == temp_c) is unchanged

    def test_mild_wind_just_above_threshold(self):
        assert apparent_temperature(20, 3.7) == pytest.approx(19.9)

    def test_wind_chill_applies_above_boundary(self):
        result = apparent_temperature(10, 4.9)
        assert result != 10
        assert result < 10

    def test_wind_chill_value(self):
        # 0°C with 20 km/h of wind
        assert apparent_temperature(0, 20) == pytest.approx(-5.2, abs=0.05)

    def test_heat_index(self):
        result = apparent_temperature(30, 0, humidity_pct=70)
        assert result > 30

    def test_heat_index_needs_humidity(self):
        assert apparent_temperature(30, 0) == 30
        assert apparent_temperature(30, 0, humidity_pct=30) == 30

    def test_mild_wind_adjustment(self):
        assert apparent_temperature(20, 36) == pytest.approx(19.5)

    def test_calm_returns_temperature(self):
        assert apparent_temperature(18.3, 2.0) == 18.3


class TestWindDirection:
    """Test compass naming."""

    def test_short_names(self):
        assert wind_direction_name(0) == "N"
        assert wind_direction_name(90) == "E"
        assert wind_direction_name(225) == "SO"
        assert wind_direction_name(359) == "N"

    def test_full_names(self):
        assert wind_direction_name(180, full=True) == "Sur"
        assert wind_direction_name(315, full=True) == "Noroeste"

    def test_half_way_rounds_up(self):
        assert wind_direction_name(22.5) == "NE"
        assert wind_direction_name(337.5) == "N"

    def test_with_degrees(self):
        assert wind_direction_with_degrees(225) == "Suroeste (225°)"
