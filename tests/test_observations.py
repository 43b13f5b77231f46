"""
Tests for latest-reading normalization and the multi-station fetch.
"""

import asyncio
from datetime import datetime, timezone

import pytest

from meteoviveiro.exceptions import MeteoConnectionError
from meteoviveiro.observations import (
    fetch_latest_observations,
    get_measurement_unit,
    get_measurement_value,
    normalize_observation,
    observation_feels_like,
    prepare_snapshot_comparison,
)
from meteoviveiro.stations import default_registry


@pytest.fixture
def borreiros():
    return default_registry().get(10162)


class TestNormalizeObservation:
    """Test turning a latest-reading payload into an Observation."""

    def test_basic(self, latest_payload, borreiros):
        obs = normalize_observation(latest_payload, borreiros)

        assert obs is not None
        assert obs.station_id == 10162
        assert obs.station_name == "Borreiros"
        assert obs.timestamp == datetime(2025, 1, 15, 12, 10, tzinfo=timezone.utc)

    def test_unknown_code_dropped(self, latest_payload, borreiros):
        obs = normalize_observation(latest_payload, borreiros)
        codes = [m.parameter_code for m in obs.measurements]

        assert "XX_UNKNOWN" not in codes
        assert codes == ["TA_AVG_1.5m", "HR_AVG_1.5m", "VV_AVG_2m", "DV_AVG_2m"]

    def test_wind_converted_to_kmh(self, latest_payload, borreiros):
        obs = normalize_observation(latest_payload, borreiros)
        wind = obs.find("VV_AVG_2m")

        assert wind.value == pytest.approx(9.0)
        assert wind.unit == "km/h"

    def test_catalog_name_used(self, latest_payload, borreiros):
        obs = normalize_observation(latest_payload, borreiros)
        assert obs.find("TA_AVG_1.5m").parameter_name == "Temperatura"

    @pytest.mark.parametrize(
        "payload",
        [
            None,
            [],
            {},
            {"listUltimos10min": []},
            {"listUltimos10min": [{"instanteLecturaUTC": "2025-01-15T12:10:00"}]},
            {"listUltimos10min": [{"listaMedidas": []}]},
        ],
    )
    def test_unusable_payload_gives_none(self, payload, borreiros):
        assert normalize_observation(payload, borreiros) is None


class TestMeasurementLookup:
    """Test value lookups with fallback codes."""

    def test_fallback_to_2m(self, latest_payload, borreiros):
        obs = normalize_observation(latest_payload, borreiros)

        assert get_measurement_value(obs, "VV_AVG_10m", fallback="VV_AVG_2m") == pytest.approx(9.0)
        assert get_measurement_value(obs, "VV_AVG_10m") is None
        assert get_measurement_unit(obs, "VV_AVG_10m", fallback="VV_AVG_2m") == "km/h"

    def test_missing_observation(self):
        assert get_measurement_value(None, "TA_AVG_1.5m") is None
        assert get_measurement_unit(None, "TA_AVG_1.5m") == ""

    def test_feels_like(self, latest_payload, borreiros):
        obs = normalize_observation(latest_payload, borreiros)
        # 8.5°C with 9 km/h of wind: wind chill
        assert observation_feels_like(obs) < 8.5


class TestFetchLatestObservations:
    """Test the concurrent latest-reading fetch."""

    @pytest.mark.asyncio
    async def test_all_stations(self, fake_client, latest_payload):
        fake_client.get_latest_readings.return_value = latest_payload

        observations = await fetch_latest_observations(client=fake_client)

        assert [obs.station_id for obs in observations] == [10104, 10162]
        assert fake_client.get_latest_readings.await_count == 2

    @pytest.mark.asyncio
    async def test_failed_station_is_absent(self, fake_client, latest_payload):
        async def side_effect(station_id):
            if station_id == 10104:
                raise MeteoConnectionError("Network error")
            return latest_payload

        fake_client.get_latest_readings.side_effect = side_effect

        observations = await fetch_latest_observations(client=fake_client)

        assert [obs.station_id for obs in observations] == [10162]

    @pytest.mark.asyncio
    async def test_slow_station_is_absent(self, fake_client, latest_payload):
        fake_client.config = fake_client.config.with_overrides(station_timeout=0.01)

        async def side_effect(station_id):
            if station_id == 10104:
                await asyncio.sleep(1)
            return latest_payload

        fake_client.get_latest_readings.side_effect = side_effect

        observations = await fetch_latest_observations(client=fake_client)

        assert [obs.station_id for obs in observations] == [10162]

    @pytest.mark.asyncio
    async def test_empty_station_is_absent(self, fake_client):
        fake_client.get_latest_readings.return_value = {"listUltimos10min": []}

        assert await fetch_latest_observations(client=fake_client) == []

    @pytest.mark.asyncio
    async def test_unknown_station_does_not_block_others(
        self, fake_client, latest_payload
    ):
        fake_client.get_latest_readings.return_value = latest_payload

        observations = await fetch_latest_observations(
            [10162, 99999], client=fake_client
        )

        assert [obs.station_id for obs in observations] == [10162]
        fake_client.get_latest_readings.assert_awaited_once_with(10162)

    @pytest.mark.asyncio
    async def test_only_unknown_stations(self, fake_client):
        assert await fetch_latest_observations([99999], client=fake_client) == []
        fake_client.get_latest_readings.assert_not_awaited()


class TestSnapshotComparison:
    """Test the single-instant comparison across stations."""

    def test_snapshot(self, latest_payload, borreiros):
        obs = normalize_observation(latest_payload, borreiros)
        snapshot = prepare_snapshot_comparison([obs])

        codes = [entry.parameter_code for entry in snapshot]
        assert codes == ["TA_AVG_1.5m", "HR_AVG_1.5m", "VV_AVG_2m", "DV_AVG_2m"]
        assert snapshot[0].stations[10162].value == 8.5
        assert snapshot[0].stations[10162].name == "Borreiros"
