"""Módulo de recomendación.

Estructura modular:
- models.py: Schemas pydantic de reglas + contexto y resultado
- rule_table.py: Tabla por defecto y carga validada (dict / JSON)
- engine.py: CropRuleEngine (primera coincidencia gana)
- fertilizer.py: Dosificación de urea/DAP/MOP
"""

from .models import (
    CropRule,
    DefaultRecommendation,
    RecommendationContext,
    RecommendationResult,
    RuleConditions,
    RuleTable,
    RuleTableError,
)
from .rule_table import (
    CROP_RULES,
    DEFAULT_RULE_TABLE,
    get_rule_table,
    load_rule_table,
    load_rule_table_file,
)
from .engine import CropRuleEngine, recommend
from .fertilizer import DEFAULT_FERTILIZER_RATES, FertilizerDose, FertilizerRate, fertilizer_plan

__all__ = [
    "CropRule",
    "DefaultRecommendation",
    "RecommendationContext",
    "RecommendationResult",
    "RuleConditions",
    "RuleTable",
    "RuleTableError",
    "CROP_RULES",
    "DEFAULT_RULE_TABLE",
    "get_rule_table",
    "load_rule_table",
    "load_rule_table_file",
    "CropRuleEngine",
    "recommend",
    "DEFAULT_FERTILIZER_RATES",
    "FertilizerDose",
    "FertilizerRate",
    "fertilizer_plan",
]
