"""Catálogo agronómico compartido (temporadas, clima, unidades de superficie).

Valor de solo lectura que se inyecta en la carga de reglas, la
dosificación y la CLI; no es estado global mutable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

ACRES_PER_HECTARE = 2.47105


@dataclass(frozen=True)
class CatalogOption:
    value: str
    label: str


@dataclass(frozen=True)
class LandUnit:
    value: str
    label: str
    acres_per_unit: float


@dataclass(frozen=True)
class AgronomyCatalog:
    """Enumeraciones válidas para contexto y superficie."""

    seasons: Tuple[CatalogOption, ...]
    weather: Tuple[CatalogOption, ...]
    land_units: Tuple[LandUnit, ...]

    @property
    def season_values(self) -> Tuple[str, ...]:
        return tuple(o.value for o in self.seasons)

    @property
    def weather_values(self) -> Tuple[str, ...]:
        return tuple(o.value for o in self.weather)

    @property
    def land_unit_values(self) -> Tuple[str, ...]:
        return tuple(u.value for u in self.land_units)

    def unit(self, value: str) -> LandUnit:
        for u in self.land_units:
            if u.value == value:
                return u
        raise ValueError(f"Unknown land unit: {value!r} (expected one of {self.land_unit_values})")


DEFAULT_CATALOG = AgronomyCatalog(
    seasons=(
        CatalogOption("rabi", "Rabi (Winter)"),
        CatalogOption("kharif", "Kharif (Monsoon)"),
        CatalogOption("zaid", "Zaid (Summer)"),
    ),
    weather=(
        CatalogOption("sunny", "Sunny"),
        CatalogOption("cloudy", "Cloudy"),
        CatalogOption("rainy", "Rainy"),
        CatalogOption("windy", "Windy"),
        CatalogOption("humid", "Humid"),
        CatalogOption("foggy", "Foggy"),
    ),
    land_units=(
        LandUnit("acre", "Acre", 1.0),
        LandUnit("hectare", "Hectare", ACRES_PER_HECTARE),
    ),
)
