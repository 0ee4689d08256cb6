"""Schemas de la tabla de reglas de cultivos.

Validación con pydantic al cargar: claves desconocidas (p.ej. `pMIn` en
lugar de `pMin`) se rechazan en vez de ignorarse en silencio.

Se aceptan tanto nombres snake_case como las claves camelCase del
formato de configuración de la app (`pHMin`, `nMin`, `dominantWeather`,
`cropsHi`, ...).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..core.domain.reading import SensorReading

# (campo de SensorReading, límite inferior, límite superior)
_NUMERIC_BOUNDS = (
    ("ph", "ph_min", "ph_max"),
    ("moisture", "moisture_min", "moisture_max"),
    ("nitrogen", "n_min", "n_max"),
    ("phosphorus", "p_min", "p_max"),
    ("potassium", "k_min", "k_max"),
)

LOCALES = ("en", "hi", "gu")


class RuleTableError(ValueError):
    """Tabla de reglas mal formada (error de configuración, solo en carga)."""


@dataclass(frozen=True)
class RecommendationContext:
    """Contexto aportado por el usuario junto a la lectura."""

    season: Optional[str] = None
    weather: Optional[str] = None


class RuleConditions(BaseModel):
    """Condiciones de una regla. Ausente = comodín."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    ph_min: Optional[float] = Field(default=None, alias="pHMin")
    ph_max: Optional[float] = Field(default=None, alias="pHMax")
    moisture_min: Optional[float] = Field(default=None, alias="moistureMin")
    moisture_max: Optional[float] = Field(default=None, alias="moistureMax")
    n_min: Optional[float] = Field(default=None, alias="nMin")
    n_max: Optional[float] = Field(default=None, alias="nMax")
    p_min: Optional[float] = Field(default=None, alias="pMin")
    p_max: Optional[float] = Field(default=None, alias="pMax")
    k_min: Optional[float] = Field(default=None, alias="kMin")
    k_max: Optional[float] = Field(default=None, alias="kMax")
    weather: Optional[FrozenSet[str]] = Field(default=None, alias="dominantWeather")
    season: Optional[FrozenSet[str]] = None

    @field_validator("weather", "season")
    @classmethod
    def validate_not_empty(cls, v):
        if v is not None and not v:
            raise ValueError("allowed set must not be empty (omit it to allow any value)")
        return v

    @model_validator(mode="after")
    def validate_bounds_order(self):
        for _, lo_name, hi_name in _NUMERIC_BOUNDS:
            lo, hi = getattr(self, lo_name), getattr(self, hi_name)
            if lo is not None and hi is not None and lo > hi:
                raise ValueError(f"{lo_name}={lo} is greater than {hi_name}={hi}")
        return self

    def matches(self, reading: SensorReading, context: RecommendationContext) -> bool:
        """True si la lectura y el contexto cumplen todas las condiciones presentes.

        Límites numéricos inclusivos en ambos extremos.
        """
        for attr, lo_name, hi_name in _NUMERIC_BOUNDS:
            value = getattr(reading, attr)
            lo, hi = getattr(self, lo_name), getattr(self, hi_name)
            if lo is not None and value < lo:
                return False
            if hi is not None and value > hi:
                return False
        if self.weather is not None and context.weather not in self.weather:
            return False
        if self.season is not None and context.season not in self.season:
            return False
        return True


class CropNames(BaseModel):
    """Nombres de cultivos con variantes localizadas."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    crops: Tuple[str, ...] = Field(..., min_length=1, alias="cropsEn")
    crops_hi: Tuple[str, ...] = Field(default=(), alias="cropsHi")
    crops_gu: Tuple[str, ...] = Field(default=(), alias="cropsGu")

    def localized(self) -> Dict[str, Tuple[str, ...]]:
        # Sin traducción se usa el nombre en inglés
        return {
            "en": self.crops,
            "hi": self.crops_hi or self.crops,
            "gu": self.crops_gu or self.crops,
        }


class CropRule(CropNames):
    conditions: RuleConditions = Field(default_factory=RuleConditions)


class DefaultRecommendation(CropNames):
    """Recomendación terminal sin condiciones."""


class RuleTable(BaseModel):
    """Lista ordenada de reglas más el default."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    rules: Tuple[CropRule, ...]
    default: DefaultRecommendation


@dataclass(frozen=True)
class RecommendationResult:
    """Resultado del motor de reglas."""

    crops: Tuple[str, ...]
    localized: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    rule_index: Optional[int] = None  # None → default

    @property
    def is_default(self) -> bool:
        return self.rule_index is None

    def crops_for(self, locale: str) -> Tuple[str, ...]:
        return self.localized.get(locale, self.crops)

    def to_dict(self) -> dict:
        return {
            "crops": list(self.crops),
            "localized": {k: list(v) for k, v in self.localized.items()},
            "rule_index": self.rule_index,
            "is_default": self.is_default,
        }
