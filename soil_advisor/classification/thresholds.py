"""Clasificación de parámetros del suelo contra la tabla de umbrales.

Convención en los cortes: un valor igual a un punto de corte pertenece a
la banda superior.

Las bandas solo usan los cortes `low` y `high`. El corte `medium` no
participa aquí: es el nivel de suficiencia que usa la dosificación de
fertilizantes (recommendation/fertilizer.py).
"""

from __future__ import annotations

from typing import Union

from ..core.domain.reading import SensorReading
from .models import (
    DEFAULT_THRESHOLDS,
    Band,
    PhClassification,
    PhStatus,
    SoilParameter,
    SoilProfile,
    ThresholdTable,
)


def _parameter(parameter: Union[SoilParameter, str]) -> SoilParameter:
    try:
        return SoilParameter(parameter)
    except ValueError:
        if str(parameter).lower() == "ph":
            raise ValueError("pH is not banded; use classify_ph()") from None
        raise ValueError(f"Unknown soil parameter: {parameter!r}") from None


def classify(
    parameter: Union[SoilParameter, str],
    value: float,
    table: ThresholdTable = DEFAULT_THRESHOLDS,
) -> Band:
    """Asigna la banda LOW/MEDIUM/HIGH.

    value < low → LOW; low <= value < high → MEDIUM; value >= high → HIGH
    """
    cuts = table.cut_points(_parameter(parameter))
    if value < cuts.low:
        return Band.LOW
    if value < cuts.high:
        return Band.MEDIUM
    return Band.HIGH


def classify_ph(value: float, table: ThresholdTable = DEFAULT_THRESHOLDS) -> PhClassification:
    """Rango inclusivo [min, max] más desviación respecto al óptimo."""
    ph = table.ph
    if value < ph.min:
        status = PhStatus.BELOW_RANGE
    elif value > ph.max:
        status = PhStatus.ABOVE_RANGE
    else:
        status = PhStatus.IN_RANGE
    return PhClassification(status=status, deviation=value - ph.optimal)


def classify_reading(reading: SensorReading, table: ThresholdTable = DEFAULT_THRESHOLDS) -> SoilProfile:
    return SoilProfile(
        ph=classify_ph(reading.ph, table),
        nitrogen=classify(SoilParameter.NITROGEN, reading.nitrogen, table),
        phosphorus=classify(SoilParameter.PHOSPHORUS, reading.phosphorus, table),
        potassium=classify(SoilParameter.POTASSIUM, reading.potassium, table),
        moisture=classify(SoilParameter.MOISTURE, reading.moisture, table),
    )
