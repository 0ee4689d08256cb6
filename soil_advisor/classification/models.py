"""Modelos de datos para clasificación por umbrales.

Dataclasses inmutables: la tabla de umbrales se carga una vez al inicio
y es de solo lectura durante todo el proceso.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Band(str, Enum):
    """Banda cualitativa de un parámetro del suelo."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PhStatus(str, Enum):
    """Posición del pH respecto al rango aceptable."""

    BELOW_RANGE = "below_range"
    IN_RANGE = "in_range"
    ABOVE_RANGE = "above_range"


class SoilParameter(str, Enum):
    """Parámetros con cortes low/medium/high."""

    NITROGEN = "nitrogen"
    PHOSPHORUS = "phosphorus"
    POTASSIUM = "potassium"
    MOISTURE = "moisture"


@dataclass(frozen=True)
class PhRange:
    """Rango aceptable de pH y su valor óptimo."""

    min: float
    max: float
    optimal: float

    def __post_init__(self):
        if not self.min <= self.optimal <= self.max:
            raise ValueError(
                f"pH range must satisfy min <= optimal <= max, "
                f"got {self.min}/{self.optimal}/{self.max}"
            )


@dataclass(frozen=True)
class BandCutPoints:
    """Puntos de corte ordenados.

    - `low`: por debajo → LOW
    - `medium`: nivel de suficiencia (dosificación de fertilizantes)
    - `high`: desde aquí → HIGH
    """

    low: float
    medium: float
    high: float

    def __post_init__(self):
        if not self.low <= self.medium <= self.high:
            raise ValueError(
                f"Cut points must satisfy low <= medium <= high, "
                f"got {self.low}/{self.medium}/{self.high}"
            )


@dataclass(frozen=True)
class ThresholdTable:
    """Tabla de umbrales agronómicos."""

    ph: PhRange
    nitrogen: BandCutPoints
    phosphorus: BandCutPoints
    potassium: BandCutPoints
    moisture: BandCutPoints

    def cut_points(self, parameter: SoilParameter) -> BandCutPoints:
        return getattr(self, SoilParameter(parameter).value)


@dataclass(frozen=True)
class PhClassification:
    """Resultado de clasificar un pH."""

    status: PhStatus
    deviation: float  # valor - óptimo (con signo)

    @property
    def distance(self) -> float:
        """Distancia absoluta al óptimo."""
        return abs(self.deviation)


@dataclass(frozen=True)
class SoilProfile:
    """Bandas de todos los parámetros de una lectura."""

    ph: PhClassification
    nitrogen: Band
    phosphorus: Band
    potassium: Band
    moisture: Band

    def to_dict(self) -> dict:
        return {
            "ph": {
                "status": self.ph.status.value,
                "deviation": round(self.ph.deviation, 2),
            },
            "nitrogen": self.nitrogen.value,
            "phosphorus": self.phosphorus.value,
            "potassium": self.potassium.value,
            "moisture": self.moisture.value,
        }


DEFAULT_THRESHOLDS = ThresholdTable(
    ph=PhRange(min=5.5, max=7.5, optimal=6.5),
    nitrogen=BandCutPoints(low=30, medium=55, high=75),
    phosphorus=BandCutPoints(low=30, medium=55, high=75),
    potassium=BandCutPoints(low=30, medium=55, high=75),
    moisture=BandCutPoints(low=20, medium=40, high=60),
)
