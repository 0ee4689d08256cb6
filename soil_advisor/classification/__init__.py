"""Módulo de clasificación por umbrales.

Estructura modular:
- models.py: Bandas, tabla de umbrales y resultados
- thresholds.py: classify / classify_ph / classify_reading
"""

from .models import (
    DEFAULT_THRESHOLDS,
    Band,
    BandCutPoints,
    PhClassification,
    PhRange,
    PhStatus,
    SoilParameter,
    SoilProfile,
    ThresholdTable,
)
from .thresholds import classify, classify_ph, classify_reading

__all__ = [
    "DEFAULT_THRESHOLDS",
    "Band",
    "BandCutPoints",
    "PhClassification",
    "PhRange",
    "PhStatus",
    "SoilParameter",
    "SoilProfile",
    "ThresholdTable",
    "classify",
    "classify_ph",
    "classify_reading",
]
