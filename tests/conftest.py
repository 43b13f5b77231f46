"""
Shared MeteoGalicia response payloads.
"""

from unittest.mock import AsyncMock, Mock

import pytest

from meteoviveiro.config import ClientConfig


def medida(code, value, unit, name=None, validation=1):
    return {
        "codigoParametro": code,
        "nomeParametro": name or code,
        "unidade": unit,
        "valor": value,
        "lnCodigoValidacion": validation,
    }


def historical_payload(station_id, station_name, instants):
    """Build an 'ultimosHorariosEstacions' body from (timestamp, medidas) pairs."""
    return {
        "listHorarios": [
            {
                "estacion": station_name,
                "idEstacion": station_id,
                "listaInstantes": [
                    {"instanteLecturaUTC": ts, "listaMedidas": medidas}
                    for ts, medidas in instants
                ],
            }
        ]
    }


def hourly_payload(station_id, station_name, parametros):
    """Build a 'datosHorariosEstacions' body from (code, unit, [(fecha, valor)]) triples."""
    return {
        "idEstacion": station_id,
        "nombreEstacion": station_name,
        "lat": 43.66,
        "lon": -7.59,
        "parametros": [
            {
                "codigo": code,
                "nombre": code,
                "unidade": unit,
                "valores": [{"fecha": fecha, "valor": valor} for fecha, valor in valores],
            }
            for code, unit, valores in parametros
        ],
    }


@pytest.fixture
def latest_payload():
    """Latest 10-minute batch for Borreiros (2m wind sensors)."""
    return {
        "listUltimos10min": [
            {
                "estacion": "Borreiros",
                "idEstacion": 10162,
                "instanteLecturaUTC": "2025-01-15T12:10:00",
                "listaMedidas": [
                    medida("TA_AVG_1.5m", 8.5, "ºC", "Temperatura media"),
                    medida("HR_AVG_1.5m", 82.0, "%", "Humidade relativa"),
                    medida("VV_AVG_2m", 2.5, "m/s", "Velocidade do vento"),
                    medida("DV_AVG_2m", 225.0, "º", "Dirección do vento"),
                    medida("XX_UNKNOWN", 1.0, "?"),
                ],
            }
        ]
    }


@pytest.fixture
def penedo_history_payload():
    """Three hourly instants for Penedo do Galo (10m wind sensors)."""
    return historical_payload(
        10104,
        "Penedo do Galo ",
        [
            (
                "2025-01-15T10:00:00",
                [
                    medida("TA_AVG_1.5m", 15.0, "ºC"),
                    medida("VV_RACHA_10m", 5.0, "m/s"),
                ],
            ),
            (
                "2025-01-15T11:00:00",
                [
                    medida("TA_AVG_1.5m", 16.2, "ºC"),
                    medida("VV_RACHA_10m", 6.0, "m/s"),
                ],
            ),
            (
                "2025-01-15T12:00:00",
                [
                    medida("TA_AVG_1.5m", 14.8, "ºC"),
                    medida("VV_RACHA_10m", 4.0, "m/s"),
                ],
            ),
        ],
    )


@pytest.fixture
def borreiros_history_payload():
    """Two hourly instants for Borreiros, missing the 11:00 reading."""
    return historical_payload(
        10162,
        "Borreiros",
        [
            (
                "2025-01-15T10:00:00",
                [
                    medida("TA_AVG_1.5m", 17.0, "ºC"),
                    medida("VV_RACHA_2m", 3.0, "m/s"),
                    medida("DV_AVG_2m", 180.0, "º"),
                ],
            ),
            (
                "2025-01-15T12:00:00",
                [
                    medida("TA_AVG_1.5m", 16.0, "ºC"),
                    medida("VV_RACHA_2m", 2.0, "m/s"),
                    medida("DV_AVG_2m", 270.0, "º"),
                ],
            ),
        ],
    )


@pytest.fixture
def numeric_forecast_payload():
    """getNumericForecastInfo response with two hourly instants."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [-7.5947, 43.6626]},
                "properties": {
                    "days": [
                        {
                            "timePeriod": {},
                            "variables": [
                                {
                                    "name": "temperature",
                                    "units": "degc",
                                    "values": [
                                        {"timeInstant": "2025-01-15T11:00:00+01", "value": 6.0},
                                        {"timeInstant": "2025-01-15T10:00:00+01", "value": 5.0},
                                    ],
                                },
                                {
                                    "name": "wind",
                                    "moduleUnits": "m/s",
                                    "values": [
                                        {
                                            "timeInstant": "2025-01-15T10:00:00+01",
                                            "moduleValue": 5.0,
                                            "directionValue": 225.0,
                                        },
                                        {
                                            "timeInstant": "2025-01-15T11:00:00+01",
                                            "moduleValue": 1.0,
                                            "directionValue": 90.0,
                                        },
                                    ],
                                },
                                {
                                    "name": "sky_state",
                                    "values": [
                                        {
                                            "timeInstant": "2025-01-15T10:00:00+01",
                                            "value": "PARTLY_CLOUDY",
                                            "iconURL": "https://example.org/icon.png",
                                        },
                                        {
                                            "timeInstant": "2025-01-15T11:00:00+01",
                                            "value": "UNKNOWN_STATE",
                                        },
                                    ],
                                },
                                {
                                    "name": "precipitation_amount",
                                    "values": [
                                        {"timeInstant": "2025-01-15T10:00:00+01", "value": 0.4},
                                    ],
                                },
                                {
                                    "name": "relative_humidity",
                                    "values": [
                                        {"timeInstant": "2025-01-15T10:00:00+01", "value": 88},
                                    ],
                                },
                            ],
                        }
                    ]
                },
            }
        ],
    }


@pytest.fixture
def fake_client():
    """Stand-in for MeteoGaliciaClient with async endpoint mocks."""
    client = Mock()
    client.config = ClientConfig(station_timeout=1.0)
    client.get_latest_readings = AsyncMock()
    client.get_historical_readings = AsyncMock()
    client.get_hourly_readings = AsyncMock()
    client.get_numeric_forecast = AsyncMock()
    client.get_municipality_forecast = AsyncMock()
    return client
