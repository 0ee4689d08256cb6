"""CropRuleEngine - Recomendación de cultivos por reglas ordenadas.

Orden de evaluación:
1. Reglas en el orden declarado → la primera coincidencia completa gana
2. Ninguna coincide → recomendación por defecto

No hay puntuación ni búsqueda del mejor match: un cultivo válido bajo
dos reglas se reporta solo con la primera.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..core.domain.reading import SensorReading
from .models import RecommendationContext, RecommendationResult, RuleTable
from .rule_table import DEFAULT_RULE_TABLE

logger = logging.getLogger(__name__)


class CropRuleEngine:
    """Evalúa una tabla de reglas inmutable. Sin estado: seguro entre llamadas."""

    def __init__(self, table: RuleTable = DEFAULT_RULE_TABLE):
        self._table = table

    @property
    def table(self) -> RuleTable:
        return self._table

    def recommend(
        self,
        reading: SensorReading,
        context: Optional[RecommendationContext] = None,
    ) -> RecommendationResult:
        """Retorna los cultivos de la primera regla que coincide o el default.

        Nunca lanza por falta de coincidencia.
        """
        context = context or RecommendationContext()

        for index, rule in enumerate(self._table.rules):
            if rule.conditions.matches(reading, context):
                logger.debug("[RULES] Rule %d matched: %s", index, ", ".join(rule.crops))
                return RecommendationResult(
                    crops=rule.crops,
                    localized=rule.localized(),
                    rule_index=index,
                )

        default = self._table.default
        logger.debug("[RULES] No rule matched, using default: %s", ", ".join(default.crops))
        return RecommendationResult(crops=default.crops, localized=default.localized())


def recommend(
    reading: SensorReading,
    context: Optional[RecommendationContext] = None,
    table: Optional[RuleTable] = None,
) -> RecommendationResult:
    return CropRuleEngine(table or DEFAULT_RULE_TABLE).recommend(reading, context)
