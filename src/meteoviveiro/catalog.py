"""
Parameter catalog for MeteoGalicia station measurements.

Parameter codes carry the sensor mounting height as a suffix ('VV_RACHA_10m'
vs 'VV_RACHA_2m'). The catalog is an allow-list: codes it does not know are
dropped during normalization.

Availability differs per endpoint. VV_AVG_10m, for example, is reported by
the latest-reading endpoint (ultimos10minEstacionsMeteo.action) but never by
the hourly history endpoint (ultimosHorariosEstacions.action), so every entry
is tagged with where it can appear.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class ParameterInfo:
    """Display metadata for a parameter code."""

    code: str
    name: str
    unit: str  # unit after normalization (wind speeds in km/h)
    color: Optional[str] = None
    live: bool = True
    historical: bool = False


@dataclass(frozen=True)
class HeightVariantGroup:
    """
    One physical quantity measured at different sensor heights.

    variants maps a height label ('10m') to the code measured at that height.
    """

    code: str
    name: str
    unit: str
    variants: Tuple[Tuple[str, str], ...]

    @property
    def codes(self) -> List[str]:
        return [code for _, code in self.variants]

    def height_of(self, parameter_code: str) -> Optional[str]:
        for height, code in self.variants:
            if code == parameter_code:
                return height
        return None

    def code_for_height(self, height: str) -> Optional[str]:
        for variant_height, code in self.variants:
            if variant_height == height:
                return code
        return None


# (code, name, unit, color, live, historical)
_PARAMETERS = [
    ("TA_AVG_1.5m", "Temperatura", "°C", "#ef4444", True, True),
    ("TA_AVG_0.1m", "Temperatura (0.1m)", "°C", None, True, False),
    ("TO_AVG_1.5m", "Temperatura de rocío", "°C", "#14b8a6", True, True),
    ("TS_AVG_-0.1m", "Temperatura del suelo", "°C", None, True, False),
    ("HR_AVG_1.5m", "Humedad", "%", "#3b82f6", True, True),
    ("PP_SUM_1.5m", "Precipitación", "mm", "#06b6d4", True, True),
    ("VV_AVG_10m", "Velocidad del viento", "km/h", None, True, False),
    ("VV_AVG_2m", "Velocidad del viento", "km/h", None, True, False),
    ("VV_RACHA_10m", "Rachas de viento (10m)", "km/h", "#f59e0b", True, True),
    ("VV_RACHA_2m", "Rachas de viento (2m)", "km/h", "#fb923c", True, True),
    ("DV_AVG_10m", "Dirección del viento (10m)", "°", "#8b5cf6", True, True),
    ("DV_AVG_2m", "Dirección del viento (2m)", "°", "#a78bfa", True, True),
    ("PR_AVG_1.5m", "Presión atmosférica", "hPa", "#ec4899", True, True),
    ("PRED_AVG_1.5m", "Presión reducida", "hPa", None, True, False),
    ("RS_AVG_1.5m", "Radiación solar", "W/m²", "#f97316", True, True),
    ("HSOL_SUM_1.5m", "Horas de sol", "h", None, True, False),
    ("BIO_AVG_1.5m", "Radiación UV", "W/m²", None, True, False),
    ("BCN_AVG_1.5m", "Brillo del cielo nocturno", "mag/arcsec²", None, True, False),
    ("VV_SD_10m", "Desv. típica viento", "km/h", None, True, False),
    ("VV_SD_2m", "Desv. típica viento", "km/h", None, True, False),
    ("DV_SD_10m", "Desv. típica dirección", "°", None, True, False),
    ("DV_SD_2m", "Desv. típica dirección", "°", None, True, False),
    ("DV_CONDICION_10m", "Dirección racha", "°", None, True, False),
    ("DV_CONDICION_2m", "Dirección racha", "°", None, True, False),
    ("HF_SUM_2m", "Humedad foliar", "min", None, True, False),
]

_HEIGHT_VARIANT_GROUPS = [
    HeightVariantGroup(
        "VV_RACHA",
        "Rachas de viento",
        "km/h",
        (("10m", "VV_RACHA_10m"), ("2m", "VV_RACHA_2m")),
    ),
    HeightVariantGroup(
        "DV_AVG",
        "Dirección del viento",
        "°",
        (("10m", "DV_AVG_10m"), ("2m", "DV_AVG_2m")),
    ),
    HeightVariantGroup(
        "VV_AVG",
        "Velocidad del viento",
        "km/h",
        (("10m", "VV_AVG_10m"), ("2m", "VV_AVG_2m")),
    ),
]

# Parameters shown in single-instant station comparisons
MAIN_PARAMETERS = (
    "TA_AVG_1.5m",
    "HR_AVG_1.5m",
    "VV_AVG_10m",
    "VV_AVG_2m",
    "PP_SUM_1.5m",
    "PR_AVG_1.5m",
    "DV_AVG_10m",
    "DV_AVG_2m",
)


class ParameterCatalog:
    """
    Immutable lookup of known parameter codes and height-variant groups.

    Build it once (see default_catalog()) and pass it to the normalizers and
    the comparator.
    """

    def __init__(
        self,
        parameters: Iterable[ParameterInfo],
        height_groups: Iterable[HeightVariantGroup] = (),
    ):
        self._parameters: Mapping[str, ParameterInfo] = MappingProxyType(
            {info.code: info for info in parameters}
        )
        self._groups: Tuple[HeightVariantGroup, ...] = tuple(height_groups)

        group_of: Dict[str, HeightVariantGroup] = {}
        for group in self._groups:
            for code in group.codes:
                if code in group_of:
                    raise ValueError(
                        f"Parameter '{code}' belongs to more than one height group"
                    )
                group_of[code] = group
        self._group_of: Mapping[str, HeightVariantGroup] = MappingProxyType(group_of)

    def __contains__(self, code: object) -> bool:
        return code in self._parameters

    def __iter__(self) -> Iterator[ParameterInfo]:
        return iter(self._parameters.values())

    def __len__(self) -> int:
        return len(self._parameters)

    def get(self, code: str) -> Optional[ParameterInfo]:
        return self._parameters.get(code)

    def is_live(self, code: str) -> bool:
        info = self._parameters.get(code)
        return info is not None and info.live

    def is_historical(self, code: str) -> bool:
        info = self._parameters.get(code)
        return info is not None and info.historical

    def historical_codes(self) -> List[str]:
        return [info.code for info in self._parameters.values() if info.historical]

    def live_codes(self) -> List[str]:
        return [info.code for info in self._parameters.values() if info.live]

    def display_name(self, code: str, default: Optional[str] = None) -> str:
        info = self._parameters.get(code)
        if info is not None:
            return info.name
        return default if default is not None else code

    def unit(self, code: str, default: str = "") -> str:
        info = self._parameters.get(code)
        return info.unit if info is not None else default

    @property
    def height_groups(self) -> Tuple[HeightVariantGroup, ...]:
        return self._groups

    def height_group(self, code: str) -> Optional[HeightVariantGroup]:
        """Height-variant group a parameter code belongs to, if any."""
        return self._group_of.get(code)


def default_catalog() -> ParameterCatalog:
    """Catalog of the parameters published for the Viveiro stations."""
    parameters = [
        ParameterInfo(code, name, unit, color, live, historical)
        for code, name, unit, color, live, historical in _PARAMETERS
    ]
    return ParameterCatalog(parameters, _HEIGHT_VARIANT_GROUPS)
