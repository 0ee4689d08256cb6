"""Dosificación de fertilizantes (kg por acre) según N/P/K.

Regla por nutriente:
- valor < corte `low`              → dosis "muy bajo"
- `low` <= valor < corte `medium`  → dosis "bajo"
- valor >= `medium`                → sin dosis
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..catalog import DEFAULT_CATALOG, AgronomyCatalog
from ..classification.models import DEFAULT_THRESHOLDS, SoilParameter, ThresholdTable
from ..core.domain.reading import SensorReading


@dataclass(frozen=True)
class FertilizerRate:
    """Dosis por acre de un fertilizante."""

    name: str
    nutrient: SoilParameter
    low_dose: float  # kg/acre
    very_low_dose: float  # kg/acre


@dataclass(frozen=True)
class FertilizerDose:
    name: str
    nutrient: SoilParameter
    level: str  # "low" | "very_low"
    kg_per_acre: float
    total_kg: float

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "nutrient": self.nutrient.value,
            "level": self.level,
            "kg_per_acre": self.kg_per_acre,
            "total_kg": self.total_kg,
        }


DEFAULT_FERTILIZER_RATES: Tuple[FertilizerRate, ...] = (
    FertilizerRate("urea", SoilParameter.NITROGEN, low_dose=50, very_low_dose=75),
    FertilizerRate("dap", SoilParameter.PHOSPHORUS, low_dose=40, very_low_dose=60),
    FertilizerRate("mop", SoilParameter.POTASSIUM, low_dose=30, very_low_dose=50),
)


def fertilizer_plan(
    reading: SensorReading,
    land_area: float,
    unit: str = "acre",
    thresholds: ThresholdTable = DEFAULT_THRESHOLDS,
    rates: Tuple[FertilizerRate, ...] = DEFAULT_FERTILIZER_RATES,
    catalog: AgronomyCatalog = DEFAULT_CATALOG,
) -> List[FertilizerDose]:
    """Calcula las dosis necesarias para la superficie indicada.

    Args:
        reading: Lectura decodificada
        land_area: Superficie (> 0) en `unit`
        unit: Unidad del catálogo (acre, hectare)

    Returns:
        Dosis en el orden de `rates`; los nutrientes suficientes se omiten

    Raises:
        ValueError: superficie no positiva o unidad desconocida
    """
    if land_area <= 0:
        raise ValueError(f"land_area must be positive, got {land_area}")
    acres = land_area * catalog.unit(unit).acres_per_unit

    plan: List[FertilizerDose] = []
    for rate in rates:
        value = getattr(reading, rate.nutrient.value)
        cuts = thresholds.cut_points(rate.nutrient)
        dose: Optional[float]
        if value < cuts.low:
            level, dose = "very_low", rate.very_low_dose
        elif value < cuts.medium:
            level, dose = "low", rate.low_dose
        else:
            dose = None
        if dose is None:
            continue
        plan.append(FertilizerDose(
            name=rate.name,
            nutrient=rate.nutrient,
            level=level,
            kg_per_acre=float(dose),
            total_kg=round(dose * acres, 2),
        ))
    return plan
